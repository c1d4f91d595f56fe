import os

# Widgets are created in every Qt test; run them without a display.
os.environ.setdefault("QT_QPA_PLATFORM", "offscreen")

"""Shared spatial constants for validation and rendering.

Canvas units are tldraw page pixels. Text metrics are rough averages for the
"draw" font at size "m"; they only need to be conservative enough that a
label never spills outside its shape.
"""

# Shapes may hang this far past the top/left edge before counting as off-canvas.
OFF_CANVAS_TOLERANCE = 50.0

# Centres within this distance share a row (same y) or column (same x).
ALIGNMENT_TOLERANCE = 20.0

# Aligned centres further apart than this get an alignment hint.
ALIGNMENT_SNAP_TOLERANCE = 2.0

# A gap deviates when it is off the mean gap by more than BOTH of these.
SPACING_RELATIVE_THRESHOLD = 0.5  # fraction of the mean gap
SPACING_ABSOLUTE_THRESHOLD = 30.0  # px

# Fewest shapes in a row/column before gaps are compared.
SPACING_MIN_GROUP = 3

# Label-driven minimum shape size
CHAR_WIDTH = 10.0
LINE_HEIGHT = 24.0
LABEL_PADDING_X = 20.0
LABEL_PADDING_Y = 16.0
MIN_SHAPE_W = 60.0
MIN_SHAPE_H = 40.0

# Standalone text boxes: w = max(TEXT_MIN_W, TEXT_CHAR_W * len(text))
TEXT_MIN_W = 100.0
TEXT_CHAR_W = 4.0
TEXT_H = 30.0

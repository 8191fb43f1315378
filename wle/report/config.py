"""
Configuration file for the HTML report.
"""

# -------------------------
# PATHS
# -------------------------

OUTPUT_DIR = "output"
REPORT_FILE = "report.html"

# -------------------------
# LAYOUT
# -------------------------

TITLE = "Predicting weight-lifting exercise quality from wearable sensors"
PLOTLY_JS = True           # inlined so the report works offline; "cdn" keeps it small
HEATMAP_COLORSCALE = "Blues"
FLOAT_FORMAT = "{:.4f}".format

"""
report.py — Renders the analysis results into one self-contained HTML page.

Sections:
1. Data: partition sizes and class distribution
2. Feature filtering: columns removed by each stage
3. Decision tree: accuracy per cp and resampled confusion matrix
4. Random forest sweep: accuracy vs fold count and per-k mtry tables
5. Final model: in-sample and out-of-sample confusion matrices
6. Predictions for the unlabeled evaluation table

Figures are plotly (heatmaps, curves); tables are pandas `to_html`.
"""

import html
from pathlib import Path

import plotly.express as px

from wle.dataset_preparation.config import CLASSE_LABELS
from . import config


# -----------------------------
# FIGURES
# -----------------------------

def confusion_heatmap(report, title):
    fig = px.imshow(
        report.matrix.to_numpy(),
        x=list(report.matrix.columns),
        y=list(report.matrix.index),
        labels={"x": "actual", "y": "predicted", "color": "count"},
        text_auto=True,
        color_continuous_scale=config.HEATMAP_COLORSCALE,
        title=f"{title} (accuracy {report.accuracy:.4f})",
    )
    fig.update_xaxes(side="top")
    return fig


def sweep_figure(summary):
    fig = px.line(
        summary, x="k", y="accuracy", error_y="accuracy_sd", markers=True,
        title="Random forest: resampled accuracy vs fold count",
    )
    fig.update_xaxes(dtick=1)
    return fig


def tree_figure(table):
    return px.line(
        table, x="cp", y="accuracy", markers=True,
        title="Decision tree: bootstrap accuracy vs cp",
    )


# -----------------------------
# HTML HELPERS
# -----------------------------

class _FigureRenderer:
    """Embeds plotly.js with the first figure only."""

    def __init__(self, include_plotlyjs=config.PLOTLY_JS):
        self.include_plotlyjs = include_plotlyjs

    def __call__(self, fig):
        out = fig.to_html(full_html=False, include_plotlyjs=self.include_plotlyjs)
        self.include_plotlyjs = False
        return out


def _table(df, index=True):
    return df.to_html(index=index, float_format=config.FLOAT_FORMAT, border=0, classes="table")


def _columns_list(columns):
    if not columns:
        return "<p><em>none</em></p>"
    return "<p><code>" + "</code>, <code>".join(html.escape(str(c)) for c in columns) + "</code></p>"


def _confusion_section(report, title, figure):
    return f"""
    {figure(confusion_heatmap(report, title))}
    <p>Accuracy: <b>{report.accuracy:.4f}</b> over {report.n} predictions
    (rows = predicted class, columns = actual class).</p>
    {_table(report.per_class)}
    """


# -----------------------------
# REPORT
# -----------------------------

def render_report(results):
    """
    Builds the HTML report.

    Parameters
    ----------
    results : dict
        Output of `wle.run_all.run_pipeline` with keys: n_train, n_test,
        class_distribution, column_filter, n_features, tree_table,
        tree_in_sample, sweep_summary, forest_tables, k_star, in_sample,
        out_of_sample, eval_predictions.

    Returns
    -------
    str
        Complete HTML document.
    """
    figure = _FigureRenderer()
    column_filter = results["column_filter"]
    k_star = results["k_star"]

    classe_items = "".join(
        f"<li><b>{html.escape(level)}</b>: {html.escape(text)}</li>"
        for level, text in CLASSE_LABELS.items()
    )

    forest_tables = "".join(
        f"<h4>k = {k}</h4>{_table(table, index=False)}"
        for k, table in sorted(results["forest_tables"].items())
    )

    body = f"""
    <h1>{html.escape(config.TITLE)}</h1>

    <p>Six participants performed dumbbell biceps curls in five fashions while
    wearing sensors on the belt, arm, forearm and dumbbell. The label
    <code>classe</code> records the fashion:</p>
    <ul>{classe_items}</ul>
    <p>We fit a single decision tree and a family of random forests, one per
    resampling fold count, and estimate the out-of-sample accuracy of the
    chosen forest on a held-out partition that took no part in training or
    in feature selection.</p>

    <h2>1. Data</h2>
    <p>The labeled table was split {results['n_train']} / {results['n_test']} rows
    (train / test), stratified on <code>classe</code>.</p>
    {_table(results['class_distribution'])}

    <h2>2. Feature filtering</h2>
    <p>Both filters were estimated on the train partition and the same columns
    were removed from both partitions.</p>
    <h3>Mostly missing ({len(column_filter.mostly_missing)} columns)</h3>
    {_columns_list(column_filter.mostly_missing)}
    <h3>Highly correlated ({len(column_filter.highly_correlated)} columns)</h3>
    {_columns_list(column_filter.highly_correlated)}
    <p>{results['n_features']} features remain for modeling.</p>

    <h2>3. Decision tree</h2>
    <p>The pruning parameter cp was chosen by accuracy over bootstrap resamples.</p>
    {figure(tree_figure(results['tree_table']))}
    {_table(results['tree_table'], index=False)}
    {_confusion_section(results['tree_in_sample'], "Decision tree, resampled", figure)}

    <h2>4. Random forest sweep</h2>
    <p>One forest per fold count k (k = 1 is a single bootstrap iteration), each
    tuning mtry, the number of features tried at every split. Returns diminish
    beyond k = 4.</p>
    {figure(sweep_figure(results['sweep_summary']))}
    {_table(results['sweep_summary'], index=False)}
    <details><summary>Accuracy per mtry for every k</summary>{forest_tables}</details>

    <h2>5. Final model (k = {k_star})</h2>
    <h3>In-sample (resampled)</h3>
    {_confusion_section(results['in_sample'], f"Random forest k={k_star}, resampled", figure)}
    <h3>Out-of-sample (held-out test partition)</h3>
    {_confusion_section(results['out_of_sample'], f"Random forest k={k_star}, test partition", figure)}
    <p>The expected out-of-sample error is
    <b>{1 - results['out_of_sample'].accuracy:.4f}</b>.</p>

    <h2>6. Evaluation table predictions</h2>
    {_table(results['eval_predictions'], index=False)}
    """

    return f"""<!DOCTYPE html>
<html lang="en">
<head>
<meta charset="utf-8">
<title>{html.escape(config.TITLE)}</title>
<style>
body {{ font-family: sans-serif; max-width: 960px; margin: 2em auto; line-height: 1.4; }}
table.table {{ border-collapse: collapse; margin: 1em 0; }}
table.table td, table.table th {{ padding: 0.2em 0.8em; text-align: right; }}
code {{ font-size: 0.9em; }}
</style>
</head>
<body>
{body}
</body>
</html>
"""


def write_report(html_text, output_dir=config.OUTPUT_DIR, filename=config.REPORT_FILE):
    output_path = Path(output_dir) / filename
    output_path.parent.mkdir(parents=True, exist_ok=True)
    output_path.write_text(html_text, encoding="utf-8")
    print(f"[OK] Report written to {output_path}")
    return output_path

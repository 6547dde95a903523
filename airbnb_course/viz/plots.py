"""Shared Plotly figures for the session scripts and the dashboard."""
import numpy as np
import pandas as pd
import plotly.express as px
import plotly.graph_objects as go

from airbnb_course.config import CITY_CENTER

LABELS = {
    "price": "Nightly price ($)",
    "accommodates": "Accommodates",
    "resid": "Residual",
    "pred": "Prediction",
    "price_per_day_person": "Price per day per person ($)",
    "reviewer_sentiment": "Reviewer sentiment",
    "description_sentiment": "Description sentiment",
    "review_scores_rating": "Review score",
}

CLUSTER_PALETTE = px.colors.qualitative.Set1


def apply_common_layout(fig, title=None, height=500):
    """Apply common layout settings to a Plotly figure."""
    fig.update_layout(
        template="plotly_white",
        height=height,
        title=title,
        title_x=0.5,
        margin=dict(t=60, b=40, l=60, r=40),
    )
    return fig


def model_fit_chart(df, x, y="price", pred="pred", color=None, title="Model fit"):
    """Observed points plus one prediction line per model (or a single line)."""
    points = df.drop_duplicates(subset=[x, y]) if color else df
    fig = px.scatter(points, x=x, y=y, opacity=0.3, labels=LABELS)
    line = df.sort_values(x)
    if color:
        for name, group in line.groupby(color):
            fig.add_trace(go.Scatter(x=group[x], y=group[pred], mode="lines", name=str(name)))
    else:
        fig.add_trace(go.Scatter(x=line[x], y=line[pred], mode="lines", name="fit",
                                 line=dict(color="red")))
    return apply_common_layout(fig, title)


def residual_chart(df, x, resid="resid", boxplot=False, title="Residuals"):
    if boxplot:
        fig = px.box(df.assign(**{x: df[x].astype(str)}), x=x, y=resid, labels=LABELS)
    else:
        fig = px.scatter(df, x=x, y=resid, opacity=0.4, labels=LABELS)
    fig.add_hline(y=0, line_dash="dash", line_color="gray")
    return apply_common_layout(fig, title)


def lasso_path_chart(path, title="LASSO coefficient path"):
    """Coefficients against log(lambda), one line per predictor."""
    log_lambda = np.log(path.lambdas)
    fig = go.Figure()
    for name, coefs in path.coefficients.iterrows():
        fig.add_trace(go.Scatter(x=log_lambda, y=coefs.values, mode="lines", name=str(name)))
    fig.update_layout(xaxis_title="log(lambda)", yaxis_title="Coefficient", showlegend=False)
    return apply_common_layout(fig, title)


def lasso_cv_chart(result, title="Cross-validated MSE"):
    table = result.cv_table
    x = np.log(table["lambda"])
    fig = go.Figure(go.Scatter(
        x=x, y=table["cvm"], mode="markers", marker=dict(color="red"),
        error_y=dict(type="data", array=table["cvsd"], color="gray"),
    ))
    for lam in (result.lambda_min, result.lambda_1se):
        fig.add_vline(x=np.log(lam), line_dash="dot")
    fig.update_layout(xaxis_title="log(lambda)", yaxis_title="Mean squared error")
    return apply_common_layout(fig, title)


def roc_chart(roc: pd.DataFrame, auc_value=None, title="ROC curve"):
    fig = go.Figure(go.Scatter(
        x=roc["fpr"], y=roc["tpr"], mode="lines+markers",
        marker=dict(color=roc["threshold"].clip(0, 1), colorscale="Viridis", showscale=True),
        name="ROC",
    ))
    fig.add_trace(go.Scatter(x=[0, 1], y=[0, 1], mode="lines", line=dict(dash="dash", color="gray"),
                             name="chance"))
    if auc_value is not None:
        title = f"{title} (AUC = {auc_value:.3f})"
    fig.update_layout(xaxis_title="False positive rate", yaxis_title="True positive rate")
    return apply_common_layout(fig, title)


def histogram_chart(df, x, nbins=30, title=None, height=400):
    fig = px.histogram(df, x=x, nbins=nbins, labels=LABELS)
    return apply_common_layout(fig, title, height)


def sentiment_box_chart(df, x, y="reviewer_sentiment", title=None):
    fig = px.box(df.assign(**{x: df[x].astype(str)}), x=x, y=y, labels=LABELS)
    return apply_common_layout(fig, title)


def listings_map(df, color=None, hover_name=None, hover_data=None, title=None, height=500, zoom=11):
    """Listings as points on an OpenStreetMap basemap."""
    center = (
        {"lat": float(df["latitude"].mean()), "lon": float(df["longitude"].mean())}
        if len(df) else {"lat": CITY_CENTER[0], "lon": CITY_CENTER[1]}
    )
    plot_df = df.assign(**{color: df[color].astype(str)}) if color else df
    fig = px.scatter_map(
        plot_df, lat="latitude", lon="longitude", color=color,
        hover_name=hover_name, hover_data=hover_data,
        color_discrete_sequence=CLUSTER_PALETTE, zoom=zoom, center=center,
        map_style="open-street-map",
    )
    return apply_common_layout(fig, title, height)


def cluster_heatmap(counts: pd.DataFrame, method: str, title=None):
    """Listings per neighbourhood and cluster for one clustering method."""
    sub = counts[counts["method"] == method]
    grid = sub.pivot_table(index="neighbourhood_cleansed", columns="cluster", values="n", fill_value=0)
    fig = go.Figure(go.Heatmap(z=grid.values, x=grid.columns.astype(str), y=grid.index, colorscale="Blues"))
    fig.update_layout(xaxis_title="Cluster", yaxis_title="Neighbourhood")
    return apply_common_layout(fig, title or f"{method} clusters by neighbourhood")

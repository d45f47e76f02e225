import pandas as pd
import plotly.graph_objects as go

import variables as var


STATUS_COLORS = {
    "waiting": "#9CA3AF",
    "due": "#F59E0B",
    "processed": "#10B981",
}


def rating_distribution(reviews_df, color="#C23331"):
    """Bar of how many reviews gave each 1-5 score."""
    ratings = pd.to_numeric(reviews_df.get(var.col_rating, pd.Series(dtype=float)), errors="coerce").dropna()
    counts = ratings.astype(int).value_counts().reindex(range(1, 6), fill_value=0)

    fig = go.Figure(
        go.Bar(
            x=[f"{i} ★" for i in counts.index],
            y=counts.values.tolist(),
            marker_color=color,
            hovertemplate="%{x}: %{y} reviews<extra></extra>",
        )
    )
    fig.update_layout(title="Honesty scores", height=280, margin=dict(l=10, r=10, t=40, b=10))
    fig.update_yaxes(rangemode="tozero", tickformat=",d")
    return fig


def queue_status_fig(queue_df):
    """Queued bot replies per hour, stacked by status."""
    if queue_df is None or queue_df.empty:
        return None

    df = queue_df.dropna(subset=[var.col_scheduled_at]).copy()
    if df.empty:
        return None

    df["hour"] = df[var.col_scheduled_at].dt.tz_convert(None).dt.floor("h")
    counts = df.groupby(["hour", "status"]).size().unstack(fill_value=0)

    fig = go.Figure()
    for status, color in STATUS_COLORS.items():
        if status not in counts.columns:
            continue
        fig.add_trace(go.Bar(
            x=counts.index,
            y=counts[status],
            name=status,
            marker_color=color,
            hovertemplate="%{x|%b %d %H:00}<br>%{y} " + status + "<extra></extra>",
        ))

    fig.update_layout(
        barmode="stack",
        title="Bot reply queue",
        height=320,
        margin=dict(l=10, r=10, t=40, b=10),
        legend=dict(orientation="h", y=-0.2),
    )
    return fig

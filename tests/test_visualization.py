from datetime import date

import plotly.graph_objects as go

from financeflow.analytics import CategoryTotal, TrendPoint
from financeflow.models import find_category
from financeflow.visualization import (
    PRIMARY_COLOR,
    breakdown_frame,
    create_category_donut,
    create_monthly_bar_chart,
    create_trend_line_chart,
    empty_figure,
)


def breakdown():
    return [
        CategoryTotal(category=find_category('food'), total=700.0),
        CategoryTotal(category=find_category('transport'), total=300.0),
    ]


def trend():
    return [
        TrendPoint(label='Jan', start=date(2024, 1, 1), amount=120.0),
        TrendPoint(label='Feb', start=date(2024, 2, 1), amount=80.0),
        TrendPoint(label='Mar', start=date(2024, 3, 1), amount=200.0),
    ]


def test_empty_inputs_return_empty_figure():
    for fig in (create_category_donut([]), create_trend_line_chart([]), create_monthly_bar_chart([])):
        assert isinstance(fig, go.Figure)
        assert len(fig.data) == 0
        assert fig.layout.title.text == "No data to display"


def test_empty_figure_custom_title():
    assert empty_figure("Nothing yet").layout.title.text == "Nothing yet"


def test_breakdown_frame_columns():
    frame = breakdown_frame(breakdown())
    assert list(frame.columns) == ["Category", "Icon", "Color", "Amount"]
    assert frame["Category"].tolist() == ["Food & Dining", "Transport"]
    assert frame["Amount"].tolist() == [700.0, 300.0]


def test_donut_uses_category_colours():
    fig = create_category_donut(breakdown(), theme='dark')
    assert len(fig.data) >= 1
    pie = fig.data[0]
    assert pie.type == 'pie'
    assert pie.hole == 0.55
    assert list(pie.marker.colors) == ["#FF6B6B", "#4ECDC4"]
    assert fig.layout.title.text == "Spending by category"


def test_trend_line_chart():
    fig = create_trend_line_chart(trend(), title="Six months")
    assert fig.data[0].type == 'scatter'
    assert list(fig.data[0].x) == ['Jan', 'Feb', 'Mar']
    assert list(fig.data[0].y) == [120.0, 80.0, 200.0]
    assert fig.data[0].line.color == PRIMARY_COLOR
    assert fig.layout.title.text == "Six months"


def test_monthly_bar_chart():
    fig = create_monthly_bar_chart(trend())
    assert fig.data[0].type == 'bar'
    assert list(fig.data[0].y) == [120.0, 80.0, 200.0]
    assert fig.layout.title.text == "Monthly comparison"

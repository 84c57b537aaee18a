"""
Chart Components for the Shop Dashboard
Order and inventory charts using Plotly
"""

import plotly.graph_objects as go
import pandas as pd
from typing import List

from models import Fabric, Order, OrderStatus


class ChartBuilder:
    """Build dashboard charts"""

    COLORS = {
        'bg': '#ffffff',
        'paper': '#ffffff',
        'grid': '#e2e8f0',
        'text': '#1e293b',
        'text_muted': '#64748b',
        'accent': '#b45309',
        'accent2': '#7c3aed',
    }

    @staticmethod
    def get_layout_template() -> dict:
        """Get consistent layout template for all charts"""
        return {
            'paper_bgcolor': ChartBuilder.COLORS['paper'],
            'plot_bgcolor': ChartBuilder.COLORS['bg'],
            'font': {
                'family': 'Inter, sans-serif',
                'color': ChartBuilder.COLORS['text'],
                'size': 12
            },
            'margin': {'l': 40, 'r': 20, 't': 40, 'b': 40},
            'xaxis': {'gridcolor': ChartBuilder.COLORS['grid'], 'showgrid': False},
            'yaxis': {'gridcolor': ChartBuilder.COLORS['grid'], 'showgrid': True},
            'showlegend': False,
        }

    # =========================================================================
    # Frames
    # =========================================================================

    @staticmethod
    def orders_to_frame(orders: List[Order]) -> pd.DataFrame:
        """One row per order: id, date, status, items, total"""
        df = pd.DataFrame([
            {
                'order': o.display_id,
                'date': o.created_at,
                'status': o.status.value,
                'items': o.item_count,
                'total': float(o.total),
            }
            for o in orders
        ], columns=['order', 'date', 'status', 'items', 'total'])
        if not df.empty:
            df['date'] = pd.to_datetime(df['date'], utc=True, errors='coerce')
        return df

    @staticmethod
    def status_counts(orders: List[Order]) -> pd.DataFrame:
        """Order count per status, in lifecycle order, zero-filled"""
        counts = pd.Series([o.status.value for o in orders], dtype=object).value_counts()
        statuses = [s.value for s in OrderStatus]
        return pd.DataFrame({
            'status': statuses,
            'count': [int(counts.get(s, 0)) for s in statuses],
        })

    # =========================================================================
    # Charts
    # =========================================================================

    @staticmethod
    def create_orders_by_status_chart(orders: List[Order], height: int = 320) -> go.Figure:
        """Bar chart of orders per status"""
        counts = ChartBuilder.status_counts(orders)

        fig = go.Figure(go.Bar(
            x=counts['status'],
            y=counts['count'],
            marker_color=[OrderStatus(s).color for s in counts['status']],
            text=counts['count'],
            textposition='outside',
        ))

        layout = ChartBuilder.get_layout_template()
        layout['height'] = height
        layout['title'] = {'text': 'Orders by Status', 'x': 0.02, 'font': {'size': 14}}
        fig.update_layout(**layout)
        return fig

    @staticmethod
    def create_revenue_chart(orders: List[Order], height: int = 320) -> go.Figure:
        """Daily revenue from orders that were not cancelled or refunded"""
        df = ChartBuilder.orders_to_frame(
            [o for o in orders if o.status not in (OrderStatus.CANCELLED, OrderStatus.REFUNDED)]
        )
        fig = go.Figure()

        if not df.empty and df['date'].notna().any():
            daily = df.dropna(subset=['date']).set_index('date')['total'].resample('D').sum()
            fig.add_trace(go.Scatter(
                x=daily.index,
                y=daily.values,
                mode='lines+markers',
                line={'color': ChartBuilder.COLORS['accent'], 'width': 2},
                name='Revenue',
            ))

        layout = ChartBuilder.get_layout_template()
        layout['height'] = height
        layout['title'] = {'text': 'Daily Revenue', 'x': 0.02, 'font': {'size': 14}}
        fig.update_layout(**layout)
        return fig

    @staticmethod
    def create_stock_chart(fabrics: List[Fabric], height: int = 320) -> go.Figure:
        """Horizontal bars of stock per fabric, lowest first"""
        df = pd.DataFrame(
            [{'name': f.name, 'stock': f.stock} for f in fabrics],
            columns=['name', 'stock'],
        ).sort_values('stock')

        fig = go.Figure(go.Bar(
            x=df['stock'],
            y=df['name'],
            orientation='h',
            marker_color=ChartBuilder.COLORS['accent2'],
        ))

        layout = ChartBuilder.get_layout_template()
        layout['height'] = max(height, 28 * len(df))
        layout['title'] = {'text': 'Stock Levels', 'x': 0.02, 'font': {'size': 14}}
        fig.update_layout(**layout)
        return fig

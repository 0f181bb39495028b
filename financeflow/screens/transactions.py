"""Transactions screen: search, filters, add/edit/delete and CSV export."""

from __future__ import annotations

from datetime import date
from typing import Optional, Sequence

import pandas as pd
import streamlit as st

from ..formatting import format_currency, format_currency_with_sign
from ..models import CATEGORIES, Transaction, TransactionType, category_label, find_category
from ..selectors import filter_transactions
from ..session import SessionController
from .layout import render_empty_state, rerun, run_command

SHOW_ADD_KEY = "show_add_transaction"
EDITING_KEY = "editing_transaction_id"

TYPE_OPTIONS = ('all', TransactionType.EXPENSE.value, TransactionType.INCOME.value)
TYPE_LABELS = {'all': "All Types", 'expense': "Expenses", 'income': "Income"}


def category_filter_options() -> list:
    return ['all'] + [cat.id for cat in CATEGORIES]


def category_filter_label(value: str) -> str:
    if value == 'all':
        return "All Categories"
    category = find_category(value)
    return f"{category.icon} {category.name}" if category else category_label(value)


def transactions_table(transactions: Sequence[Transaction]) -> pd.DataFrame:
    """Display frame for a list of transactions, in the given order."""
    rows = []
    for txn in transactions:
        category = find_category(txn.category)
        rows.append({
            'Date': txn.date,
            'Description': txn.description,
            'Category': f"{category.icon} {category.name}" if category else category_label(txn.category),
            'Type': txn.type.value.title(),
            'Amount': format_currency_with_sign(txn.amount, txn.type.value),
        })
    return pd.DataFrame(rows, columns=['Date', 'Description', 'Category', 'Type', 'Amount'])


def render_transaction_form(
    controller: SessionController,
    existing: Optional[Transaction] = None,
    key: str = "transaction_form",
) -> bool:
    """Add form, or edit form when ``existing`` is given. Returns True on save."""
    category_ids = [cat.id for cat in CATEGORIES]
    types = [TransactionType.EXPENSE.value, TransactionType.INCOME.value]

    with st.form(key, clear_on_submit=existing is None):
        col1, col2 = st.columns(2)
        with col1:
            txn_type = st.radio(
                "Type",
                types,
                index=types.index(existing.type.value) if existing else 0,
                format_func=str.title,
                horizontal=True,
            )
            amount = st.number_input(
                "Amount (₹)",
                min_value=0.0,
                step=10.0,
                value=float(existing.amount) if existing else 0.0,
            )
            txn_date = st.date_input("Date", value=existing.date if existing else date.today())
        with col2:
            category_index = (
                category_ids.index(existing.category)
                if existing and existing.category in category_ids else None
            )
            category = st.selectbox(
                "Category",
                category_ids,
                index=category_index,
                format_func=category_filter_label,
                placeholder="Select a category",
            )
            description = st.text_input(
                "Description",
                value=existing.description if existing else "",
                placeholder="What was this for?",
            )
        submitted = st.form_submit_button(
            "Save Changes" if existing else "Add Transaction",
            type="primary",
            use_container_width=True,
        )

    if not submitted:
        return False
    if existing:
        return run_command(
            controller.update_transaction,
            existing.id, amount, category, description, txn_date, txn_type,
            success="Transaction updated",
        )
    return run_command(
        controller.add_transaction,
        amount, category, description, txn_date, txn_type,
        success="Transaction added",
    )


def render_add_transaction_panel(controller: SessionController) -> None:
    """Toggleable add form shared by the dashboard and the transactions list."""
    if not st.session_state.get(SHOW_ADD_KEY, False):
        return
    with st.expander("➕ New transaction", expanded=True):
        if render_transaction_form(controller, key="add_transaction_form"):
            st.session_state[SHOW_ADD_KEY] = False
            rerun()
        if st.button("Cancel", key="cancel_add_transaction"):
            st.session_state[SHOW_ADD_KEY] = False
            rerun()


def _render_row(controller: SessionController, txn: Transaction) -> None:
    category = find_category(txn.category)
    icon = category.icon if category else "❔"
    name = category.name if category else category_label(txn.category)

    col1, col2, col3, col4 = st.columns([4, 2, 1, 1])
    with col1:
        st.markdown(f"{icon} **{txn.description}**  \n<small>{name} · {txn.date:%d %b %Y}</small>", unsafe_allow_html=True)
    with col2:
        color = "#D63031" if txn.is_expense else "#00B894"
        st.markdown(
            f"<span style='color:{color};font-weight:600'>{format_currency_with_sign(txn.amount, txn.type.value)}</span>",
            unsafe_allow_html=True,
        )
    with col3:
        if st.button("✏️", key=f"edit_{txn.id}", help="Edit transaction"):
            st.session_state[EDITING_KEY] = txn.id
            rerun()
    with col4:
        if st.button("🗑️", key=f"delete_{txn.id}", help="Delete transaction"):
            if run_command(controller.delete_transaction, txn.id, success="Transaction deleted"):
                rerun()

    if st.session_state.get(EDITING_KEY) == txn.id:
        with st.container(border=True):
            if render_transaction_form(controller, existing=txn, key=f"edit_form_{txn.id}"):
                st.session_state.pop(EDITING_KEY, None)
                rerun()
            if st.button("Cancel", key=f"cancel_edit_{txn.id}"):
                st.session_state.pop(EDITING_KEY, None)
                rerun()


def render(controller: SessionController) -> None:
    """Render the Transactions screen."""
    state = controller.state

    header, actions = st.columns([3, 2])
    with header:
        st.title("Transactions")
        st.markdown("Manage and track all your transactions")

    col1, col2, col3 = st.columns([2, 1, 1])
    with col1:
        query = st.text_input("Search", placeholder="Search transactions...", label_visibility="collapsed")
    with col2:
        category = st.selectbox(
            "Category",
            category_filter_options(),
            format_func=category_filter_label,
            label_visibility="collapsed",
        )
    with col3:
        txn_type = st.selectbox(
            "Type",
            TYPE_OPTIONS,
            format_func=TYPE_LABELS.get,
            label_visibility="collapsed",
        )

    view = filter_transactions(state.transactions, query, category, txn_type)

    with actions:
        add_col, export_col = st.columns(2)
        with add_col:
            if st.button("➕ Add", type="primary", use_container_width=True):
                st.session_state[SHOW_ADD_KEY] = True
        with export_col:
            content, filename = controller.export_csv(query, category, txn_type)
            st.download_button(
                "⬇️ Export",
                data=content,
                file_name=filename,
                mime="text/csv",
                use_container_width=True,
                disabled=not view.transactions,
            )

    render_add_transaction_panel(controller)

    stat1, stat2 = st.columns(2)
    with stat1:
        st.metric("Total Expenses", format_currency(view.expense_total))
    with stat2:
        st.metric("Transactions", len(view.transactions))

    if not view.transactions:
        if state.transactions:
            render_empty_state("🔍", "No matching transactions", "Try adjusting your search or filters")
        else:
            render_empty_state("🧾", "No transactions yet", "Start tracking your expenses by adding your first transaction")
        return

    for txn in view.transactions:
        _render_row(controller, txn)
        st.divider()

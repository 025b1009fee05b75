"""
Streamlit Frontend for Transaction Splits

A split editor for one transaction at a time.

DESIGN PRINCIPLES:
1. The original transaction is always visible, with its live remainder
2. One error banner, in plain language
3. Nothing is saved without an explicit "Save" action
4. Cancel throws away every edit

The session object lives in st.session_state between reruns; every button
maps to exactly one session operation.
"""

import asyncio
from datetime import date

import streamlit as st

from src.config import get_settings, validate_all_settings
from src.models.transaction import UNSELECTED, Category, CategoryRef, Subcategory, Transaction
from src.orchestrator import (
    SessionState,
    SplitEditingSession,
    create_app_components,
    open_split_session,
)
from src.services.storage import InMemoryTransactionSplitStore
from src.splits.amounts import format_currency


# Page configuration
st.set_page_config(
    page_title="Transaction Splits",
    page_icon="✂️",
    layout="wide",
)


def run_async(coro):
    """Helper to run async functions in Streamlit."""
    loop = asyncio.new_event_loop()
    asyncio.set_event_loop(loop)
    try:
        return loop.run_until_complete(coro)
    finally:
        loop.close()


def demo_store() -> InMemoryTransactionSplitStore:
    """A store with a couple of transactions to play with."""
    groceries = Category(
        id=1,
        name="Food",
        category_type="expense",
        subcategories=[
            Subcategory(id=11, name="Groceries", category_id=1),
            Subcategory(id=12, name="Restaurants", category_id=1),
        ],
    )
    household = Category(
        id=2,
        name="Home",
        category_type="expense",
        subcategories=[
            Subcategory(id=21, name="Household Supplies", category_id=2),
            Subcategory(id=22, name="Furniture", category_id=2),
        ],
    )
    return InMemoryTransactionSplitStore(
        transactions=[
            Transaction(
                id=1,
                amount="-182.40",
                description="WAREHOUSE CLUB #0412",
                transaction_date=date.today().isoformat(),
                category=CategoryRef(id=1, name="Food"),
                subcategory=CategoryRef(id=11, name="Groceries"),
            ),
            Transaction(
                id=2,
                amount="2500.00",
                description="PAYROLL DEPOSIT",
                transaction_date=date.today().isoformat(),
            ),
        ],
        categories=[groceries, household],
    )


@st.cache_resource
def get_components(use_demo_data: bool):
    """Get or create application components (cached)."""
    return create_app_components(store=demo_store() if use_demo_data else None)


def main():
    """Main application entry point."""
    st.sidebar.title("✂️ Transaction Splits")
    use_demo_data = st.sidebar.checkbox("Use demo data", value=True)
    if not use_demo_data:
        render_connection_status()
    store, audit_logger = get_components(use_demo_data)

    if "categories" not in st.session_state:
        try:
            st.session_state.categories = run_async(store.fetch_categories())
        except Exception as e:
            st.sidebar.error(f"Could not load categories: {e}")
            st.session_state.categories = []

    session: SplitEditingSession = st.session_state.get("split_session")

    if session is None or session.is_closed:
        render_open_form(store, audit_logger)
        if st.session_state.get("last_close_refresh"):
            st.success("Splits saved. The transaction list should be refreshed.")
        return

    render_session(session, st.session_state.categories)


def render_connection_status():
    """Show whether the API settings load."""
    status = validate_all_settings()
    if status.get("api", False):
        st.sidebar.success(f"✅ Transactions API - {get_settings().api.base_url}")
    else:
        st.sidebar.error(f"❌ Transactions API - {status.get('api_error', 'Not configured')}")


def on_session_closed(refresh_needed: bool) -> None:
    st.session_state.last_close_refresh = refresh_needed


def render_open_form(store, audit_logger):
    st.title("Edit Transaction Splits")
    transaction_id = st.number_input("Transaction ID", min_value=1, step=1, value=1)

    if st.button("Open", type="primary"):
        st.session_state.last_close_refresh = None
        with st.spinner("Loading transaction..."):
            st.session_state.split_session = run_async(
                open_split_session(
                    transaction_id=int(transaction_id),
                    store=store,
                    on_close=on_session_closed,
                    audit_logger=audit_logger,
                )
            )
        st.rerun()


def subcategory_options(categories: list[Category]) -> list[CategoryRef]:
    options = [UNSELECTED]
    for category in categories:
        for subcategory in category.subcategories:
            options.append(CategoryRef(id=subcategory.id, name=subcategory.name))
    return options


def render_session(session: SplitEditingSession, categories: list[Category]):
    st.title("Edit Transaction Splits")

    if session.state == SessionState.LOADING:
        st.error(session.load_error or "Loading...")
        col1, col2 = st.columns(2)
        if col1.button("Retry"):
            run_async(session.open())
            st.rerun()
        if col2.button("Close"):
            run_async(session.cancel())
            st.rerun()
        return

    if session.error_message:
        col1, col2 = st.columns([10, 1])
        col1.error(session.error_message)
        if col2.button("✕", key="dismiss_error"):
            session.dismiss_error()
            st.rerun()

    original = session.original
    st.subheader("Original Transaction")
    st.table([{
        "Date": original.transaction_date,
        "Description": original.description,
        "Subcategory": original.subcategory.name,
        "Amount": format_currency(original.amount),
    }])

    st.subheader("Splits")
    options = subcategory_options(categories)
    for split in session.visible_splits:
        render_split_row(session, split, options)

    if session.page_count > 1:
        col1, col2, col3 = st.columns([1, 2, 1])
        if col1.button("Previous", disabled=session.current_page == 1):
            session.go_to_page(session.current_page - 1)
            st.rerun()
        col2.markdown(f"Page {session.current_page} of {session.page_count}")
        if col3.button("Next", disabled=session.current_page == session.page_count):
            session.go_to_page(session.current_page + 1)
            st.rerun()

    st.markdown("---")
    col1, col2, col3 = st.columns([2, 1, 1])
    if col1.button("➕ Add Split"):
        session.add_split()
        st.rerun()
    if col2.button("↩️ Cancel"):
        run_async(session.cancel())
        st.rerun()
    if col3.button("✅ Save", type="primary", disabled=session.state == SessionState.SAVING):
        with st.spinner("Saving..."):
            run_async(session.save())
        st.rerun()


def render_split_row(session: SplitEditingSession, split: Transaction, options: list[CategoryRef]):
    errors = session.field_errors(split.id)
    cols = st.columns([2, 4, 3, 2, 1])

    parsed = split.parsed_date
    picked = cols[0].date_input(
        "Date",
        value=parsed,
        key=f"date_{split.id}",
        label_visibility="collapsed",
    )
    if picked and picked.isoformat() != split.transaction_date:
        session.update_split(split.id, transaction_date=picked.isoformat())
        st.rerun()

    description = cols[1].text_input(
        "Description",
        value=split.description,
        key=f"description_{split.id}",
        label_visibility="collapsed",
    )
    if description != split.description:
        session.update_split(split.id, description=description)
        st.rerun()

    current = next((i for i, o in enumerate(options) if o.id == split.subcategory.id), 0)
    chosen = cols[2].selectbox(
        "Subcategory",
        options=options,
        index=current,
        format_func=lambda o: o.name or "Select a subcategory",
        key=f"subcategory_{split.id}",
        label_visibility="collapsed",
    )
    if chosen.id != split.subcategory.id:
        session.update_subcategory(split.id, chosen)
        st.rerun()

    # Keyed on the stored amount so the input shows the formatted value
    # once the typed text has been normalized.
    amount = cols[3].text_input(
        "Amount",
        value=split.amount,
        key=f"amount_{split.id}_{split.amount}",
        label_visibility="collapsed",
    )
    if amount != split.amount:
        session.enter_amount(split.id, amount)
        if session.ledger.get_split(split.id).amount != split.amount:
            st.rerun()

    if cols[4].button("✕", key=f"remove_{split.id}"):
        session.remove_split(split.id)
        st.rerun()

    for message in errors.values():
        st.caption(f"⚠️ {message}")


if __name__ == "__main__":
    main()

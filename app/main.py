import pandas as pd
import plotly.express as px
import streamlit as st

from expenses.aggregate import top_categories
from expenses.config import load_settings
from expenses.dates import parse_timestamp, to_local
from expenses.domain import Creating, Editing, FilterMode, Totals
from expenses.errors import ExpenseNotFoundError, ValidationError
from expenses.events import EXPENSE_ADDED, EXPENSE_DELETED, EXPENSE_EDITED, Event
from expenses.logging_setup import configure_logging, get_logger
from expenses.services import ExpenseService
from expenses.store import ExpenseStore
from expenses.transforms import find_expense

settings = load_settings()
configure_logging(settings.log_level)
logger = get_logger("expenses.app")

st.set_page_config(page_title="Expenses", layout="centered")


def _toast(event: Event) -> None:
    messages = {
        EXPENSE_ADDED: "Expense added",
        EXPENSE_EDITED: "Expense saved",
        EXPENSE_DELETED: "Expense deleted",
    }
    st.toast(messages[event.name])


@st.cache_resource
def get_service() -> ExpenseService:
    store = ExpenseStore(settings.db_path)
    store.setup()
    service = ExpenseService(store)
    for name in (EXPENSE_ADDED, EXPENSE_EDITED, EXPENSE_DELETED):
        service.bus.subscribe(name, _toast)
    logger.info(f"Opened expense database {settings.db_path}")
    return service


service = get_service()

if "form_mode" not in st.session_state:
    st.session_state.form_mode = Creating()
if "form_error" not in st.session_state:
    st.session_state.form_error = None


def fmt(amount) -> str:
    return f"{amount:,.2f} {settings.currency}"


def _clear_form() -> None:
    st.session_state.amount_input = ""
    st.session_state.category_input = ""
    st.session_state.note_input = ""
    st.session_state.form_mode = Creating()
    st.session_state.form_error = None


def _show_form_error(err) -> None:
    st.session_state.form_error = err.message


def _on_submit() -> None:
    result = service.submit(
        st.session_state.form_mode,
        st.session_state.amount_input,
        st.session_state.category_input,
        st.session_state.note_input,
    )
    result.fold(_show_form_error, lambda saved: _clear_form())


def _on_edit(expense_id: int) -> None:
    e = find_expense(service.load(), expense_id)
    if e is None:
        st.session_state.form_error = f"Expense {expense_id} no longer exists"
        return
    st.session_state.amount_input = str(e.amount)
    st.session_state.category_input = e.category
    st.session_state.note_input = e.note
    st.session_state.form_mode = Editing(expense_id)
    st.session_state.form_error = None


def _on_delete(expense_id: int) -> None:
    try:
        service.delete(expense_id)
    except ExpenseNotFoundError as e:
        st.session_state.form_error = str(e)
        return
    if st.session_state.form_mode == Editing(expense_id):
        _clear_form()


st.title("💸 Expense Tracker")

editing = isinstance(st.session_state.form_mode, Editing)
with st.form("expense_form"):
    col1, col2 = st.columns(2)
    with col1:
        st.text_input("Amount", key="amount_input", placeholder="0.00")
    with col2:
        st.text_input("Category", key="category_input", placeholder="Food")
    st.text_input("Note (optional)", key="note_input")
    st.form_submit_button("Save" if editing else "Add", on_click=_on_submit)

if editing:
    st.caption(f"Editing expense #{st.session_state.form_mode.expense_id}")
    st.button("Cancel", on_click=_clear_form)

if st.session_state.form_error:
    st.error(st.session_state.form_error)

mode = st.radio(
    "Show",
    list(FilterMode),
    format_func=lambda m: m.label,
    horizontal=True,
)

try:
    report = service.summary(mode)
except ValidationError as e:
    logger.error(f"Cannot total expenses: {e}")
    st.error(f"Cannot total expenses: {e.message}")
    st.stop()
result = report["result"]

st.metric("Total", fmt(result["total"]))

if report["skipped"]:
    st.warning(f"{len(report['skipped'])} expense(s) have an unreadable date and are not counted.")

if result["by_category"]:
    totals = Totals(result["total"], result["by_category"])
    df_cat = pd.DataFrame(
        [{"Category": name, "Amount": float(amount)} for name, amount in top_categories(totals, len(totals.by_category))]
    )
    chart_col, table_col = st.columns([3, 2])
    with chart_col:
        fig = px.bar(df_cat, x="Category", y="Amount", title="By category")
        fig.update_layout(height=300, margin=dict(t=40, b=10, l=10, r=10))
        st.plotly_chart(fig, use_container_width=True)
    with table_col:
        st.dataframe(
            df_cat.assign(Amount=[fmt(totals.by_category[name]) for name in df_cat["Category"]]),
            hide_index=True,
            use_container_width=True,
        )

st.subheader("Expenses")
if not report["expenses"]:
    st.info("No expenses yet.")

for e in report["expenses"]:
    try:
        when = to_local(parse_timestamp(e.ts)).strftime("%Y-%m-%d %H:%M")
    except ValidationError:
        when = str(e.ts)
    row = st.columns([3, 2, 1, 1])
    with row[0]:
        st.markdown(f"**{e.category}** · {when}")
        if e.note:
            st.caption(e.note)
    with row[1]:
        st.markdown(fmt(e.amount))
    with row[2]:
        st.button("Edit", key=f"edit_{e.id}", on_click=_on_edit, args=(e.id,))
    with row[3]:
        st.button("🗑", key=f"delete_{e.id}", on_click=_on_delete, args=(e.id,))

"""
Streamlit Frontend for the Renovation Planner

The screens a homeowner uses while a renovation is underway: projects,
budget, expenses, schedule, materials, contacts and a journal.

DESIGN PRINCIPLES:
1. One current project, chosen in the sidebar and remembered
2. Every number on screen is recomputed from stored data
3. Errors are shown as messages, never as tracebacks
4. Budget alerts appear right after the expense that caused them
"""

import asyncio
from datetime import date
from decimal import Decimal

import streamlit as st

from renovation.formatting import format_currency, format_date, format_percentage
from renovation.models import (
    ContactRole,
    ExpenseCategory,
    MaterialStatus,
    PaymentType,
    Project,
)
from renovation.notifications import AlertLevel
from renovation.orchestrator import AppComponents, create_app_components
from renovation.repositories import ExpenseSortOption, ProjectSortOrder
from renovation.sample_data import seed_sample_project
from renovation.viewmodels import (
    AddExpenseViewModel,
    BudgetDashboardViewModel,
    ContactListViewModel,
    ExpenseListViewModel,
    JournalListViewModel,
    MaterialListViewModel,
    PhaseDetailViewModel,
    ProjectFilter,
    ProjectListViewModel,
)


# Page configuration
st.set_page_config(
    page_title="Renovation Planner",
    page_icon="🏠",
    layout="wide",
    initial_sidebar_state="expanded",
)


def run_async(coro):
    """Helper to run async functions in Streamlit."""
    loop = asyncio.new_event_loop()
    asyncio.set_event_loop(loop)
    try:
        return loop.run_until_complete(coro)
    finally:
        loop.close()


@st.cache_resource
def get_components() -> AppComponents:
    """Get or create application components (cached)."""
    return create_app_components()


def show_error(view_model) -> None:
    if view_model.error_message:
        st.error(view_model.error_message)
        view_model.clear_error()


def show_alerts(components: AppComponents) -> None:
    """Show budget alerts raised since the last action."""
    for alert in components.notifications.pop_alerts():
        if alert.level is AlertLevel.OVER_BUDGET:
            st.error(f"🚨 {alert.message}")
        else:
            st.warning(f"⚠️ {alert.message}")


def main():
    """Main application entry point."""
    components = get_components()

    st.sidebar.title("🏠 Renovation Planner")
    st.sidebar.markdown("---")

    project_list = ProjectListViewModel(components.projects, components.schedule, components.session)
    run_async(project_list.load())
    project = components.session.current_project(project_list.projects)

    if project_list.has_projects:
        names = {p.id: p.name for p in project_list.projects}
        ids = list(names)
        chosen = st.sidebar.selectbox(
            "Current project",
            options=ids,
            index=ids.index(project.id) if project else 0,
            format_func=lambda pid: names[pid],
        )
        if project is None or chosen != project.id:
            components.session.select_id(chosen)
            st.rerun()

    page = st.sidebar.radio(
        "Navigate to:",
        ["📁 Projects", "💰 Budget", "🧾 Expenses", "📅 Schedule",
         "🧱 Materials", "👷 Contacts", "📔 Journal", "⚙️ Settings"],
        index=0,
    )

    if page == "📁 Projects":
        render_projects_page(components, project_list)
    elif project is None:
        st.info("Create a project first, or load the sample data from Settings.")
    elif page == "💰 Budget":
        render_budget_page(components, project)
    elif page == "🧾 Expenses":
        render_expenses_page(components, project)
    elif page == "📅 Schedule":
        render_schedule_page(components, project)
    elif page == "🧱 Materials":
        render_materials_page(components)
    elif page == "👷 Contacts":
        render_contacts_page(components)
    elif page == "📔 Journal":
        render_journal_page(components)
    elif page == "⚙️ Settings":
        render_settings_page(components)


# =============================================================================
# Projects
# =============================================================================

def render_projects_page(components: AppComponents, view_model: ProjectListViewModel):
    st.title("📁 Projects")
    show_error(view_model)

    col1, col2, col3, col4 = st.columns(4)
    col1.metric("Projects", view_model.total_projects)
    col2.metric("Active", view_model.total_active_projects)
    col3.metric("Completed", view_model.total_completed_projects)
    col4.metric("Delayed", view_model.total_delayed_projects)
    st.progress(view_model.average_progress, text=f"Average progress {format_percentage(view_model.average_progress)}")

    col1, col2, col3 = st.columns(3)
    view_model.search_text = col1.text_input("Search", placeholder="Name, house type or notes")
    view_model.selected_filter = col2.selectbox(
        "Show", list(ProjectFilter), format_func=lambda f: f.display_name
    )
    view_model.sort_order = col3.selectbox(
        "Sort by", list(ProjectSortOrder), format_func=lambda s: s.display_name
    )

    for project in view_model.filtered_projects:
        marker = "⭐ " if view_model.is_selected(project) else ""
        with st.expander(f"{marker}{project.name} · {format_percentage(view_model.progress(project), 0)}"):
            st.write(f"{project.house_type} · {project.area:g} m² · starts {format_date(project.start_date)}")
            if view_model.is_delayed(project):
                st.warning("Behind schedule")
            c1, c2, c3, c4 = st.columns(4)
            if c1.button("Select", key=f"select-{project.id}"):
                view_model.select(project)
                st.rerun()
            if c2.button("Deactivate" if project.is_active else "Activate", key=f"toggle-{project.id}"):
                run_async(view_model.toggle_active(project))
                st.rerun()
            if c3.button("Duplicate", key=f"dup-{project.id}"):
                run_async(view_model.duplicate(project))
                st.rerun()
            if c4.button("Delete", key=f"delete-{project.id}"):
                run_async(view_model.delete(project))
                st.rerun()

    st.markdown("---")
    st.subheader("New project")
    with st.form("new_project"):
        name = st.text_input("Name *")
        house_type = st.text_input("House type")
        area = st.number_input("Floor area (m²)", min_value=1.0, value=90.0)
        start_date = st.date_input("Start date", value=date.today())
        duration = st.number_input("Estimated duration (days)", min_value=1, value=90)
        budget = st.number_input("Budget", min_value=0.0, value=0.0, step=1000.0)
        with_phases = st.checkbox("Add the standard phases", value=True)
        if st.form_submit_button("Create", type="primary"):
            try:
                project = Project(
                    name=name,
                    house_type=house_type,
                    area=area,
                    start_date=start_date,
                    estimated_duration=int(duration),
                )
            except ValueError as e:
                st.error(str(e))
            else:
                run_async(components.projects.create(project, Decimal(str(budget))))
                if with_phases:
                    run_async(components.schedule.create_default_phases(project))
                components.session.select(project)
                st.rerun()


# =============================================================================
# Budget and expenses
# =============================================================================

def render_budget_page(components: AppComponents, project: Project):
    st.title("💰 Budget")
    view_model = BudgetDashboardViewModel(components.budgets, components.expenses)
    run_async(view_model.load(project))
    show_error(view_model)

    if not view_model.has_budget:
        amount = st.text_input("Total budget")
        if st.button("Create budget", type="primary"):
            run_async(view_model.create_budget(project, amount))
            show_error(view_model)
            st.rerun()
        return

    if view_model.is_over_budget:
        st.error(f"Over budget by {view_model.estimated_overage_formatted}")
    elif view_model.has_warning:
        st.warning(f"Budget usage has reached {view_model.usage_percentage_formatted}")

    col1, col2, col3, col4 = st.columns(4)
    col1.metric("Budget", view_model.total_budget_formatted)
    col2.metric("Spent", view_model.total_expenses_formatted)
    col3.metric("Remaining", view_model.remaining_budget_formatted)
    col4.metric("This month", view_model.current_month_expenses_formatted)
    st.progress(min(view_model.usage_percentage, 1.0), text=view_model.usage_percentage_formatted)

    st.subheader("By category")
    for stat in view_model.category_statistics:
        st.write(f"{stat.category.display_name}: {format_currency(stat.amount)} "
                 f"({stat.count} · {format_percentage(stat.percentage)})")

    st.subheader("Recent expenses")
    for expense in view_model.recent_expenses:
        st.write(f"{format_date(expense.date)} · {expense.category.display_name} · "
                 f"{format_currency(expense.amount)} {expense.notes}")

    with st.expander("Edit budget"):
        new_total = st.text_input("Total budget", value=str(view_model.statistics.total_budget))
        threshold = st.slider(
            "Warning threshold", 0.0, 1.0, value=view_model.statistics.warning_threshold, step=0.05
        )
        if st.button("Save"):
            run_async(view_model.update_total_budget(new_total))
            run_async(view_model.update_warning_threshold(threshold))
            show_error(view_model)
            st.rerun()


def render_expenses_page(components: AppComponents, project: Project):
    st.title("🧾 Expenses")
    budget = run_async(components.budgets.fetch_budget(project))
    if budget is None:
        st.info("Create a budget first.")
        return

    show_alerts(components)

    add_view_model = AddExpenseViewModel(components.record_expense)
    with st.form("add_expense", clear_on_submit=True):
        col1, col2 = st.columns(2)
        add_view_model.amount = col1.text_input("Amount *")
        add_view_model.category = col1.selectbox(
            "Category", list(ExpenseCategory), format_func=lambda c: c.display_name
        )
        add_view_model.expense_date = col2.date_input("Date", value=date.today())
        add_view_model.payment_type = col2.selectbox(
            "Payment", list(PaymentType), format_func=lambda p: p.display_name
        )
        add_view_model.vendor = st.text_input("Vendor")
        add_view_model.notes = st.text_area("Notes")
        if st.form_submit_button("Record expense", type="primary"):
            if run_async(add_view_model.save(budget)):
                st.rerun()
            show_error(add_view_model)

    list_view_model = ExpenseListViewModel(components.expenses, components.record_expense)
    col1, col2, col3 = st.columns(3)
    list_view_model.search_text = col1.text_input("Search notes or vendor")
    category = col2.selectbox(
        "Category filter", [None, *ExpenseCategory],
        format_func=lambda c: "All" if c is None else c.display_name,
    )
    list_view_model.selected_category = category
    list_view_model.sort_option = col3.selectbox(
        "Sort", list(ExpenseSortOption), format_func=lambda s: s.display_name
    )
    run_async(list_view_model.load(budget))
    show_error(list_view_model)

    st.caption(f"{len(list_view_model.expenses)} expenses · {list_view_model.total_formatted}")
    groups = list_view_model.month_groups or []
    if groups:
        for group in groups:
            st.subheader(f"{group.label} · {format_currency(group.total)}")
            render_expense_rows(list_view_model, group.expenses, budget)
    else:
        render_expense_rows(list_view_model, list_view_model.expenses, budget)


def render_expense_rows(view_model: ExpenseListViewModel, expenses, budget):
    for expense in expenses:
        col1, col2 = st.columns([5, 1])
        col1.write(f"{format_date(expense.date)} · {expense.category.display_name} · "
                   f"{format_currency(expense.amount)} · {expense.vendor} {expense.notes}")
        if col2.button("Delete", key=f"delete-expense-{expense.id}"):
            run_async(view_model.delete(expense, budget))
            st.rerun()


# =============================================================================
# Schedule
# =============================================================================

def render_schedule_page(components: AppComponents, project: Project):
    st.title("📅 Schedule")
    phases = run_async(components.schedule.fetch_phases(project))
    if not phases:
        if st.button("Add the standard phases", type="primary"):
            run_async(components.schedule.create_default_phases(project))
            st.rerun()
        return

    st.progress(Project.overall_progress(phases), text=f"Overall {format_percentage(Project.overall_progress(phases))}")

    for phase in phases:
        view_model = PhaseDetailViewModel(phase, components.schedule, components.update_task_status)
        summary = view_model.status_summary
        title = f"{'✅' if phase.is_completed else '🔨' if phase.is_in_progress else '⏳'} {phase.title}"
        with st.expander(f"{title} · {summary.completed}/{summary.total}"):
            st.caption(f"{format_date(phase.planned_start_date)} → {format_date(phase.planned_end_date)}")
            if phase.is_delayed():
                st.warning(f"Delayed by {phase.delayed_days()} days")

            for task in view_model.filtered_tasks:
                col1, col2, col3 = st.columns([4, 1, 1])
                col1.write(f"{task.title} · {task.status.display_name}")
                if col2.button("Next", key=f"toggle-{task.id}"):
                    run_async(view_model.toggle_task(task))
                    st.rerun()
                if col3.button("Delete", key=f"delete-task-{task.id}"):
                    run_async(view_model.delete_task(task))
                    st.rerun()

            new_title = st.text_input("New task", key=f"new-task-{phase.id}")
            c1, c2, c3 = st.columns(3)
            if c1.button("Add task", key=f"add-task-{phase.id}") and new_title:
                run_async(view_model.add_task(new_title))
                st.rerun()
            if not phase.has_started and c2.button("Start phase", key=f"start-{phase.id}"):
                run_async(view_model.start_phase())
                st.rerun()
            if not phase.is_completed and c3.button("Complete phase", key=f"complete-{phase.id}"):
                run_async(view_model.complete_phase())
                st.rerun()
            show_error(view_model)


# =============================================================================
# Materials, contacts, journal
# =============================================================================

def render_materials_page(components: AppComponents):
    st.title("🧱 Materials")
    view_model = MaterialListViewModel(components.materials, components.projects, components.session)
    col1, col2 = st.columns(2)
    view_model.search_text = col1.text_input("Search materials")
    view_model.selected_status = col2.selectbox(
        "Status", [None, *MaterialStatus],
        format_func=lambda s: "All" if s is None else s.display_name,
    )
    run_async(view_model.load())
    show_error(view_model)

    st.metric("Total cost", view_model.total_cost_formatted)
    for status, materials in view_model.grouped_by_status:
        st.subheader(status.display_name)
        for material in materials:
            st.write(f"{material.name} {material.brand} · {material.quantity:g} {material.unit} · "
                     f"{format_currency(material.total_price)}")

    with st.form("add_material", clear_on_submit=True):
        name = st.text_input("Name *")
        brand = st.text_input("Brand")
        unit_price = st.number_input("Unit price", min_value=0.0, step=10.0)
        quantity = st.number_input("Quantity", min_value=0.0, step=1.0)
        unit = st.text_input("Unit", value="pcs")
        if st.form_submit_button("Add material"):
            run_async(view_model.add(
                name=name, brand=brand, unit_price=Decimal(str(unit_price)),
                quantity=quantity, unit=unit,
            ))
            show_error(view_model)


def render_contacts_page(components: AppComponents):
    st.title("👷 Contacts")
    view_model = ContactListViewModel(components.contacts, components.projects, components.session)
    col1, col2 = st.columns(2)
    view_model.search_text = col1.text_input("Search contacts")
    view_model.selected_role = col2.selectbox(
        "Role", [None, *ContactRole],
        format_func=lambda r: "All" if r is None else r.display_name,
    )
    run_async(view_model.load())
    show_error(view_model)

    for role, contacts in view_model.grouped_contacts:
        st.subheader(role.display_name)
        for contact in contacts:
            col1, col2 = st.columns([5, 1])
            star = "👍 " if contact.is_recommended else ""
            col1.write(f"{star}{contact.name} · {contact.company} · {contact.phone_number}")
            if col2.button("Recommend", key=f"rec-{contact.id}"):
                run_async(view_model.toggle_recommended(contact))
                st.rerun()

    with st.form("add_contact", clear_on_submit=True):
        name = st.text_input("Name *")
        role = st.selectbox("Role", list(ContactRole), format_func=lambda r: r.display_name)
        phone = st.text_input("Phone")
        company = st.text_input("Company")
        if st.form_submit_button("Add contact"):
            run_async(view_model.add(name=name, role=role, phone_number=phone, company=company))
            show_error(view_model)


def render_journal_page(components: AppComponents):
    st.title("📔 Journal")
    view_model = JournalListViewModel(components.journal, components.projects, components.session)
    run_async(view_model.load())
    col1, col2 = st.columns(2)
    view_model.search_text = col1.text_input("Search journal")
    view_model.selected_tag = col2.selectbox("Tag", [None, *view_model.all_tags],
                                             format_func=lambda t: "All" if t is None else t)
    show_error(view_model)

    for month, entries in view_model.grouped_entries:
        st.subheader(month)
        for entry in entries:
            with st.expander(f"{format_date(entry.date)} · {entry.title}"):
                st.write(entry.content)
                if entry.tags:
                    st.caption(" ".join(f"#{tag}" for tag in entry.tags))

    with st.form("add_entry", clear_on_submit=True):
        title = st.text_input("Title *")
        content = st.text_area("Content")
        tags = st.text_input("Tags (comma separated)")
        if st.form_submit_button("Add entry"):
            run_async(view_model.add(
                title=title,
                content=content,
                tags=[t.strip() for t in tags.split(",") if t.strip()],
            ))
            show_error(view_model)


# =============================================================================
# Settings
# =============================================================================

def render_settings_page(components: AppComponents):
    st.title("⚙️ Settings")
    st.markdown(f"**Database:** `{components.database.url}`")
    st.markdown(f"**Session file:** `{components.session.state_path}`")

    if st.button("Load sample data"):
        project = run_async(seed_sample_project(components.storage))
        components.session.select(project)
        st.success(f"Created sample project '{project.name}'")

    st.subheader("Recent activity")
    events = run_async(components.audit_logger.recent_events(20))
    for event in events:
        st.caption(f"{event.timestamp:%Y-%m-%d %H:%M} · {event.event_type.value} · {event.description}")


if __name__ == "__main__":
    main()

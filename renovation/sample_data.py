"""
Sample data

Creates one demo project, about halfway through its schedule, so every
screen has something to show.
"""

from datetime import date, timedelta
from decimal import Decimal
from typing import Optional

from renovation.config import get_logger
from renovation.models import (
    Contact,
    ContactRole,
    Expense,
    ExpenseCategory,
    JournalEntry,
    Material,
    MaterialStatus,
    PaymentType,
    Phase,
    PhaseType,
    Project,
    Task,
    TaskStatus,
)
from renovation.repositories import ProjectRepository
from renovation.services.storage import RecordStorageInterface


logger = get_logger("sample_data")


# (days after start, amount, category, notes, payment type)
SAMPLE_EXPENSES = [
    (0, "8000", ExpenseCategory.DESIGN, "Whole-home design plan", PaymentType.FULL),
    (15, "5500", ExpenseCategory.DEMOLITION, "Open up living room to balcony", PaymentType.FULL),
    (20, "20000", ExpenseCategory.PLUMBING, "Plumbing and wiring, labour and materials", PaymentType.DEPOSIT),
    (30, "15000", ExpenseCategory.FLOORING, "Living room, kitchen and bathroom tiles", PaymentType.FULL),
    (35, "9000", ExpenseCategory.MASONRY, "Tiling labour", PaymentType.FULL),
    (40, "18000", ExpenseCategory.CARPENTRY, "Ceilings and cabinet boards", PaymentType.DEPOSIT),
]

# (phase type, planned days, actual days or None when unfinished, started, task titles)
SAMPLE_PHASES = [
    (PhaseType.PREPARATION, 14, 12, True, ["Confirm design", "Sign contract", "Property permit"]),
    (PhaseType.DEMOLITION, 5, 4, True, ["Remove partition wall", "Clear debris"]),
    (PhaseType.PLUMBING, 10, 10, True, ["Water pipes", "Electrical wiring", "Pressure test"]),
    (PhaseType.MASONRY, 15, None, True, ["Waterproofing", "Bathroom tiles", "Kitchen tiles", "Floor tiles"]),
    (PhaseType.CARPENTRY, 15, None, False, ["Suspended ceiling", "Built-in wardrobes"]),
    (PhaseType.PAINTING, 10, None, False, ["Putty", "Primer and topcoat"]),
    (PhaseType.INSTALLATION, 10, None, False, ["Cabinets", "Sanitary ware", "Lights"]),
]


def _build_phases(project: Project, today: date) -> list[Phase]:
    phases = []
    current = project.start_date
    for order, (phase_type, planned_days, actual_days, started, titles) in enumerate(SAMPLE_PHASES):
        phase = Phase(
            project_id=project.id,
            title=phase_type.display_name,
            phase_type=phase_type,
            sort_order=order,
            planned_start_date=current,
            planned_end_date=current + timedelta(days=planned_days),
        )
        for title in titles:
            phase.add_task(Task(title=title))

        if actual_days is not None:
            phase.start(current)
            phase.complete(current + timedelta(days=actual_days))
        elif started:
            phase.start(current)
            # First half of the tasks done, one in progress
            half = len(phase.tasks) // 2
            for task in phase.tasks[:half]:
                task.complete(min(today, current + timedelta(days=3)))
            phase.tasks[half].status = TaskStatus.IN_PROGRESS

        phases.append(phase)
        current += timedelta(days=planned_days)
    return phases


async def seed_sample_project(
    storage: RecordStorageInterface,
    today: Optional[date] = None,
) -> Project:
    """
    Store a demo project with budget, expenses, phases and tasks,
    materials, contacts and a journal entry.

    Returns:
        The new project
    """
    today = today or date.today()
    start = today - timedelta(days=45)

    project = Project(
        name="My Home",
        house_type="3 bedrooms, 2 living rooms",
        area=120,
        start_date=start,
        estimated_duration=90,
        notes="New flat, Scandinavian minimal style",
    )
    budget = await ProjectRepository(storage).create(project, Decimal("180000"), 0.8)

    records = []
    for offset, amount, category, notes, payment_type in SAMPLE_EXPENSES:
        records.append(Expense(
            budget_id=budget.id,
            amount=Decimal(amount),
            category=category,
            date=start + timedelta(days=offset),
            notes=notes,
            payment_type=payment_type,
        ))

    records.extend(_build_phases(project, today))

    records.extend([
        Material(
            project_id=project.id,
            name="Floor tiles",
            brand="Marco Polo",
            specification="800x800 mm",
            unit_price=Decimal("120"),
            quantity=85,
            unit="m2",
            status=MaterialStatus.INSTALLED,
            location="Living room",
        ),
        Material(
            project_id=project.id,
            name="Wall paint",
            brand="Nippon",
            specification="Low VOC, white",
            unit_price=Decimal("680"),
            quantity=6,
            unit="bucket",
            status=MaterialStatus.ORDERED,
        ),
        Material(
            project_id=project.id,
            name="Wardrobe boards",
            specification="18 mm E0 multilayer",
            unit_price=Decimal("260"),
            quantity=40,
            unit="sheet",
            status=MaterialStatus.PENDING,
            location="Bedrooms",
        ),
    ])

    records.extend([
        Contact(
            project_id=project.id,
            name="Mr. Wang",
            role=ContactRole.FOREMAN,
            phone_number="138-0000-0001",
            company="Sunrise Renovation",
            rating=5,
            is_recommended=True,
        ),
        Contact(
            project_id=project.id,
            name="Ms. Li",
            role=ContactRole.DESIGNER,
            phone_number="139-0000-0002",
            company="Studio North",
            rating=4,
        ),
        Contact(
            project_id=project.id,
            name="Tile shop",
            role=ContactRole.VENDOR,
            phone_number="021-0000-0003",
        ),
    ])

    records.append(JournalEntry(
        project_id=project.id,
        title="Plumbing passed the pressure test",
        content="Held pressure for 30 minutes with no drop. Tiling starts next week.",
        tags=["plumbing", "milestone"],
        date=start + timedelta(days=29),
    ))

    await storage.save_all(records)
    logger.info("sample_project_created", project_id=str(project.id), records=len(records) + 2)
    return project

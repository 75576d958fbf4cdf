"""
Enumerations used across the renovation records.

All enums are str-valued so they serialize to their value in the
database and in logs.
"""

from enum import Enum


# =============================================================================
# BUDGET
# =============================================================================

class ParentCategory(str, Enum):
    """Top-level grouping of expense categories."""
    DESIGN = "design"
    HARD_DECORATION = "hard_decoration"
    MAIN_MATERIALS = "main_materials"
    SOFT_DECORATION = "soft_decoration"
    OTHER = "other"

    @property
    def display_name(self) -> str:
        return _PARENT_CATEGORY_NAMES[self]

    @property
    def sub_categories(self) -> list["ExpenseCategory"]:
        """All expense categories that roll up into this parent."""
        return [c for c in ExpenseCategory if c.parent_category is self]


_PARENT_CATEGORY_NAMES = {
    ParentCategory.DESIGN: "Design",
    ParentCategory.HARD_DECORATION: "Construction",
    ParentCategory.MAIN_MATERIALS: "Main materials",
    ParentCategory.SOFT_DECORATION: "Furnishing",
    ParentCategory.OTHER: "Other",
}


class ExpenseCategory(str, Enum):
    """
    Expense categories.

    Each category belongs to exactly one ParentCategory.
    """
    DESIGN = "design"

    # Construction work
    DEMOLITION = "demolition"
    PLUMBING = "plumbing"
    MASONRY = "masonry"
    CARPENTRY = "carpentry"
    PAINTING = "painting"

    # Main materials
    FLOORING = "flooring"
    DOORS = "doors"
    CABINETS = "cabinets"
    BATHROOM = "bathroom"
    LIGHTING = "lighting"

    # Furnishing
    FURNITURE = "furniture"
    APPLIANCES = "appliances"
    CURTAINS = "curtains"
    DECORATIONS = "decorations"

    OTHER = "other"

    @property
    def display_name(self) -> str:
        return self.value.replace("_", " ").capitalize()

    @property
    def parent_category(self) -> ParentCategory:
        return _CATEGORY_PARENTS[self]


_CATEGORY_PARENTS = {
    ExpenseCategory.DESIGN: ParentCategory.DESIGN,
    ExpenseCategory.DEMOLITION: ParentCategory.HARD_DECORATION,
    ExpenseCategory.PLUMBING: ParentCategory.HARD_DECORATION,
    ExpenseCategory.MASONRY: ParentCategory.HARD_DECORATION,
    ExpenseCategory.CARPENTRY: ParentCategory.HARD_DECORATION,
    ExpenseCategory.PAINTING: ParentCategory.HARD_DECORATION,
    ExpenseCategory.FLOORING: ParentCategory.MAIN_MATERIALS,
    ExpenseCategory.DOORS: ParentCategory.MAIN_MATERIALS,
    ExpenseCategory.CABINETS: ParentCategory.MAIN_MATERIALS,
    ExpenseCategory.BATHROOM: ParentCategory.MAIN_MATERIALS,
    ExpenseCategory.LIGHTING: ParentCategory.MAIN_MATERIALS,
    ExpenseCategory.FURNITURE: ParentCategory.SOFT_DECORATION,
    ExpenseCategory.APPLIANCES: ParentCategory.SOFT_DECORATION,
    ExpenseCategory.CURTAINS: ParentCategory.SOFT_DECORATION,
    ExpenseCategory.DECORATIONS: ParentCategory.SOFT_DECORATION,
    ExpenseCategory.OTHER: ParentCategory.OTHER,
}


class PaymentType(str, Enum):
    """How an expense was paid."""
    FULL = "full"
    DEPOSIT = "deposit"
    FINAL = "final"

    @property
    def display_name(self) -> str:
        return {
            PaymentType.FULL: "Full payment",
            PaymentType.DEPOSIT: "Deposit",
            PaymentType.FINAL: "Final payment",
        }[self]


# =============================================================================
# SCHEDULE
# =============================================================================

class TaskStatus(str, Enum):
    """
    Task status.

    pending -> in_progress -> completed is the normal path;
    issue and cancelled are side states, and any state can be reset to pending.
    """
    PENDING = "pending"
    IN_PROGRESS = "in_progress"
    COMPLETED = "completed"
    ISSUE = "issue"
    CANCELLED = "cancelled"

    @property
    def display_name(self) -> str:
        return self.value.replace("_", " ").capitalize()

    @property
    def is_final_state(self) -> bool:
        return self in (TaskStatus.COMPLETED, TaskStatus.CANCELLED)

    @property
    def sort_priority(self) -> int:
        """Lower sorts first: problems, then active work, then done."""
        return _TASK_STATUS_PRIORITY[self]


_TASK_STATUS_PRIORITY = {
    TaskStatus.ISSUE: 0,
    TaskStatus.IN_PROGRESS: 1,
    TaskStatus.PENDING: 2,
    TaskStatus.COMPLETED: 3,
    TaskStatus.CANCELLED: 4,
}


class PhaseType(str, Enum):
    """Standard renovation phases, in their usual order."""
    PREPARATION = "preparation"
    DEMOLITION = "demolition"
    PLUMBING = "plumbing"
    MASONRY = "masonry"
    CARPENTRY = "carpentry"
    PAINTING = "painting"
    INSTALLATION = "installation"
    SOFT_DECORATION = "soft_decoration"
    CLEANING = "cleaning"
    VENTILATION = "ventilation"
    CUSTOM = "custom"

    @property
    def display_name(self) -> str:
        return self.value.replace("_", " ").capitalize()

    @property
    def default_duration_days(self) -> int:
        return _PHASE_DURATIONS[self]


_PHASE_DURATIONS = {
    PhaseType.PREPARATION: 14,
    PhaseType.DEMOLITION: 7,
    PhaseType.PLUMBING: 10,
    PhaseType.MASONRY: 15,
    PhaseType.CARPENTRY: 15,
    PhaseType.PAINTING: 10,
    PhaseType.INSTALLATION: 10,
    PhaseType.SOFT_DECORATION: 7,
    PhaseType.CLEANING: 3,
    PhaseType.VENTILATION: 30,
    PhaseType.CUSTOM: 7,
}


# =============================================================================
# MATERIALS & CONTACTS
# =============================================================================

class MaterialStatus(str, Enum):
    """Purchase status of a material."""
    PENDING = "pending"
    ORDERED = "ordered"
    PURCHASED = "purchased"
    DELIVERED = "delivered"
    INSTALLED = "installed"
    ISSUE = "issue"

    @property
    def display_name(self) -> str:
        return self.value.capitalize()

    @property
    def progress_percentage(self) -> float:
        return {
            MaterialStatus.PENDING: 0.0,
            MaterialStatus.ORDERED: 25.0,
            MaterialStatus.PURCHASED: 50.0,
            MaterialStatus.DELIVERED: 75.0,
            MaterialStatus.INSTALLED: 100.0,
            MaterialStatus.ISSUE: 0.0,
        }[self]


class ContactRole(str, Enum):
    """Role of a contact in the renovation."""
    COMPANY = "company"
    DESIGNER = "designer"
    FOREMAN = "foreman"
    ELECTRICIAN = "electrician"
    MASON = "mason"
    CARPENTER = "carpenter"
    PAINTER = "painter"
    VENDOR = "vendor"
    OTHER = "other"

    @property
    def display_name(self) -> str:
        return {
            ContactRole.COMPANY: "Renovation company",
            ContactRole.VENDOR: "Material vendor",
        }.get(self, self.value.capitalize())

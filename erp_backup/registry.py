"""Static collection registries, versioned alongside the artifact format."""

from typing import Tuple

BACKUP_VERSION = "2.0.0"

# Ledger collection; not in the registry, so restores never touch it
HISTORY_COLLECTION = "backups"

COLLECTIONS: Tuple[str, ...] = (
    # Core production
    "products",
    "production_lines",
    "employees",
    "production_reports",
    "line_status",
    "line_product_config",
    "production_plans",
    # Work orders & notifications
    "work_orders",
    "notifications",
    # Product cost & materials
    "product_materials",
    "monthly_production_costs",
    "line_worker_assignments",
    # Cost management
    "cost_centers",
    "cost_center_values",
    "cost_allocations",
    "labor_settings",
    # System
    "roles",
    "users",
    "system_settings",
    "activity_logs",
    # HR
    "departments",
    "job_positions",
    "shifts",
    "hr_settings",
    "penalty_rules",
    "late_rules",
    "allowance_types",
    "attendance_raw_logs",
    "attendance_logs",
    "leave_requests",
    "leave_balances",
    "employee_loans",
    "employee_allowances",
    "employee_deductions",
    "vehicles",
    "approval_requests",
    "approval_settings",
    "approval_delegations",
    "approval_audit_logs",
    # Payroll
    "payroll_months",
    "payroll_records",
    "payroll_audit_logs",
    "payroll_cost_summary",
    # HR config
    "hr_config_modules",
    "hr_config_audit_logs",
    # Quality
    "quality_settings",
    "quality_reason_catalog",
    "quality_workers_assignments",
    "quality_inspections",
    "quality_defects",
    "quality_rework_orders",
    "quality_capa",
    "quality_print_logs",
)

SETTINGS_COLLECTIONS: Tuple[str, ...] = (
    "system_settings",
    "roles",
    "labor_settings",
    "line_product_config",
    "product_materials",
    "hr_settings",
    "hr_config_modules",
    "penalty_rules",
    "late_rules",
    "allowance_types",
    "shifts",
    "departments",
    "job_positions",
    "approval_settings",
    "quality_settings",
    "quality_reason_catalog",
)

# Time-bearing collections included in a windowed (per-month) export
WINDOWED_COLLECTIONS: Tuple[str, ...] = (
    "production_reports",
    "line_status",
    "production_plans",
    "work_orders",
    "line_worker_assignments",
    "monthly_production_costs",
    "cost_center_values",
    "cost_allocations",
    "attendance_logs",
    "attendance_raw_logs",
    "leave_requests",
)

# Checked in this order; the first truthy field decides
DATE_FIELDS: Tuple[str, ...] = ("date", "month", "createdAt")


def is_registered(name: str) -> bool:
    return name in COLLECTIONS


def major_version(version: str) -> str:
    return str(version).split(".")[0]

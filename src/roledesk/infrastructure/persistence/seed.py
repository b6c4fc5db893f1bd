"""Default permission catalog.

The seed is applied once to an empty ``permissions`` table, either on demand
(``POST /access-control/permissions/seed``, ``roledesk seed-permissions``) or
automatically the first time the catalog is read.
"""

# Display order of categories; unknown categories sort after these
CATEGORY_ORDER: tuple[str, ...] = (
    "patients",
    "visits",
    "lab",
    "consultations",
    "medications",
    "referrals",
    "appointments",
    "users",
    "organizations",
    "files",
    "billing",
    "dashboard",
    "other",
)

# (name, description, category)
DEFAULT_PERMISSIONS: tuple[tuple[str, str, str], ...] = (
    ("viewPatients", "View patient data", "patients"),
    ("editPatients", "Edit patient data", "patients"),
    ("createPatients", "Create new patient profiles", "patients"),
    ("createVisit", "Create patient visits", "visits"),
    ("viewVisits", "View visit records", "visits"),
    ("editVisits", "Edit visit records", "visits"),
    ("createLabOrder", "Create lab orders", "lab"),
    ("viewLabResults", "View lab results", "lab"),
    ("editLabResults", "Update lab results", "lab"),
    ("createConsultation", "Create specialist consultations", "consultations"),
    ("viewConsultation", "View consultation records", "consultations"),
    ("createConsultationForm", "Create consultation form templates", "consultations"),
    ("viewMedications", "View prescribed medications", "medications"),
    ("manageMedications", "Manage and dispense medications", "medications"),
    ("createPrescription", "Create prescriptions", "medications"),
    ("viewPrescriptions", "View prescription records", "medications"),
    ("createReferral", "Create patient referrals", "referrals"),
    ("viewReferrals", "View referral records", "referrals"),
    ("manageReferrals", "Accept/reject referrals", "referrals"),
    ("manageUsers", "Manage staff and user roles", "users"),
    ("viewUsers", "View staff information", "users"),
    ("manageOrganizations", "Manage organization settings", "organizations"),
    ("viewOrganizations", "View organization information", "organizations"),
    ("uploadFiles", "Upload files and documents", "files"),
    ("viewFiles", "View and download files", "files"),
    ("deleteFiles", "Delete files", "files"),
    ("viewDashboard", "Access the dashboard", "dashboard"),
    ("viewReports", "View analytics and performance reports", "dashboard"),
    ("viewAuditLogs", "View system audit logs", "dashboard"),
    ("viewAppointments", "View appointment schedules", "appointments"),
    ("createAppointments", "Create and schedule appointments", "appointments"),
    ("editAppointments", "Modify existing appointments", "appointments"),
    ("cancelAppointments", "Cancel appointments", "appointments"),
    ("viewBilling", "View invoices and billing information", "billing"),
    ("createInvoice", "Create invoices for patients", "billing"),
    ("processPayment", "Process and record payments", "billing"),
)


def category_rank(category: str) -> int:
    """Position of ``category`` in the display order."""
    try:
        return CATEGORY_ORDER.index(category)
    except ValueError:
        return len(CATEGORY_ORDER)

"""Keyword-based choice of a canned project template for an idea."""

from schemas import ProjectTemplate

CLINIC_KEYWORDS = ("عيادة", "حجز", "clinic", "booking", "appointment")
STORE_KEYWORDS = ("متجر", "store", "shop", "ecommerce", "e-commerce")

CLINIC_TEMPLATE = ProjectTemplate(
    name="Clinic Management System",
    description="Booking and patient management system for clinics",
    models=[
        {
            "name": "Patients",
            "fields": [
                {"name": "name", "type": "string"},
                {"name": "phone", "type": "string"},
            ],
        },
        {
            "name": "Appointments",
            "fields": [
                {"name": "date", "type": "date"},
                {"name": "status", "type": "string"},
            ],
        },
    ],
)

ECOMMERCE_TEMPLATE = ProjectTemplate(
    name="Ecommerce Dashboard",
    description="Online store management dashboard",
    models=[
        {
            "name": "Products",
            "fields": [
                {"name": "name", "type": "string"},
                {"name": "price", "type": "number"},
            ],
        },
        {
            "name": "Orders",
            "fields": [
                {"name": "total", "type": "number"},
                {"name": "status", "type": "string"},
            ],
        },
    ],
)

GENERIC_TEMPLATE = ProjectTemplate(
    name="Custom Dashboard",
    description="General purpose management dashboard",
    models=[
        {
            "name": "Items",
            "fields": [
                {"name": "name", "type": "string"},
                {"name": "createdAt", "type": "date"},
            ],
        },
    ],
)


def _mentions(text: str, keywords) -> bool:
    return any(k in text for k in keywords)


def select_template(idea: str) -> ProjectTemplate:
    """Return a copy of the clinic, ecommerce or generic template for `idea`."""
    text = idea.lower()
    if _mentions(text, CLINIC_KEYWORDS):
        template = CLINIC_TEMPLATE
    elif _mentions(text, STORE_KEYWORDS):
        template = ECOMMERCE_TEMPLATE
    else:
        template = GENERIC_TEMPLATE
    return template.model_copy(deep=True)

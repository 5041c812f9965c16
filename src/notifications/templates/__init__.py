"""Template registry - maps notification categories to template classes.

Each template renders a subject and a plain-text body from context data.
"""

from notifications.templates.order_status import OrderStatusTemplate

ORDER_STATUS_CATEGORY = "order-status"

TEMPLATE_REGISTRY: dict[str, type] = {
    ORDER_STATUS_CATEGORY: OrderStatusTemplate,
}


def get_template(category: str) -> type:
    """Return the template class for a notification category."""
    template = TEMPLATE_REGISTRY.get(category)
    if template is None:
        raise ValueError(f"No template registered for category: {category}")
    return template

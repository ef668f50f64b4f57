import pytest

from notification_hub.application.use_cases.notifications import DEFAULT_TEMPLATES, TemplateCatalog
from notification_hub.application.use_cases.notifications.templates import (
    body_placeholders,
    render_body,
)
from notification_hub.domain.entities import NotificationAction, NotificationTemplate


def _template(**overrides) -> NotificationTemplate:
    values = {
        "id": "custom",
        "type": "custom",
        "title": "Custom",
        "body": "Hello {{name}}",
        "variables": ("name",),
    }
    values.update(overrides)
    return NotificationTemplate(**values)


def test_default_catalog_exposes_builtin_templates():
    catalog = TemplateCatalog()

    assert set(catalog) == {template.id for template in DEFAULT_TEMPLATES}
    assert catalog["transaction_validation"].type == "validation"
    assert catalog.resolve("missing") is None
    assert catalog.resolve(None) is None


def test_render_body_interpolates_known_variables():
    template = TemplateCatalog()["transaction_created"]

    assert render_body(template, {"amount": "5 000 XOF"}) == (
        "Une nouvelle transaction de 5 000 XOF a été créée"
    )


def test_render_body_keeps_missing_placeholders():
    assert render_body(_template(), {}) == "Hello {{name}}"


def test_body_placeholders_tolerates_spaces():
    assert body_placeholders("{{ a }} and {{b}}") == {"a", "b"}


def test_catalog_rejects_undeclared_placeholders():
    with pytest.raises(ValueError, match="undeclared variables: name"):
        TemplateCatalog([_template(variables=())])


def test_catalog_rejects_duplicate_ids():
    with pytest.raises(ValueError, match="already registered"):
        TemplateCatalog([_template(), _template()])


@pytest.mark.parametrize(
    "overrides",
    [
        {"id": " "},
        {"title": ""},
        {"vibration": (100, -1)},
        {"actions": (NotificationAction("view", "A"), NotificationAction("view", "B"))},
    ],
)
def test_catalog_rejects_invalid_templates(overrides):
    with pytest.raises(ValueError):
        TemplateCatalog([_template(**overrides)])


def test_catalog_is_read_only():
    catalog = TemplateCatalog([_template()])

    with pytest.raises(TypeError):
        catalog["other"] = _template(id="other")  # type: ignore[index]

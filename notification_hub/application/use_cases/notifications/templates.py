"""Static catalog of notification presentation templates."""

from __future__ import annotations

import re
from collections.abc import Iterable, Iterator, Mapping
from typing import Any, Final

from notification_hub.domain.entities import NotificationAction, NotificationTemplate

_PLACEHOLDER_PATTERN: Final[re.Pattern[str]] = re.compile(r"\{\{\s*(\w+)\s*\}\}")

DEFAULT_TEMPLATES: Final[tuple[NotificationTemplate, ...]] = (
    NotificationTemplate(
        id="transaction_created",
        type="transaction",
        title="💰 Nouvelle Transaction",
        body="Une nouvelle transaction de {{amount}} a été créée",
        icon="transaction",
        color="#10B981",
        sound="default",
        vibration=(200, 100, 200),
        actions=(
            NotificationAction("view", "Voir", "view"),
            NotificationAction("dismiss", "Ignorer"),
        ),
        variables=("amount",),
    ),
    NotificationTemplate(
        id="transaction_validation",
        type="validation",
        title="⚠️ Validation Requise",
        body="La transaction {{reference}} nécessite votre validation",
        icon="validation",
        color="#F59E0B",
        sound="urgent",
        vibration=(300, 200, 300, 200, 300),
        actions=(
            NotificationAction("validate", "Valider", "validate"),
            NotificationAction("reject", "Rejeter", "reject"),
            NotificationAction("view", "Voir"),
        ),
        variables=("reference",),
    ),
    NotificationTemplate(
        id="security_alert",
        type="security",
        title="🔒 Alerte Sécurité",
        body="Activité suspecte détectée",
        icon="security",
        color="#EF4444",
        sound="urgent",
        vibration=(500, 300, 500, 300, 500),
        actions=(
            NotificationAction("secure", "Sécuriser", "secure"),
            NotificationAction("view", "Détails"),
        ),
    ),
    NotificationTemplate(
        id="system_update",
        type="system",
        title="🔄 Mise à jour",
        body="Mise à jour système disponible",
        icon="system",
        color="#6366F1",
        sound="soft",
        vibration=(100,),
        actions=(
            NotificationAction("update", "Mettre à jour", "update"),
            NotificationAction("later", "Plus tard"),
        ),
    ),
    NotificationTemplate(
        id="message",
        type="communication",
        title="💬 Nouveau Message",
        body="{{sender}} vous a envoyé un message",
        icon="message",
        color="#3B82F6",
        sound="message",
        vibration=(200, 100, 200),
        actions=(
            NotificationAction("reply", "Répondre", "reply"),
            NotificationAction("view", "Voir"),
        ),
        variables=("sender",),
    ),
)


def body_placeholders(body: str) -> set[str]:
    """Return the metadata keys referenced through ``{{name}}`` in ``body``."""

    return set(_PLACEHOLDER_PATTERN.findall(body))


def validate_template(template: NotificationTemplate) -> None:
    """Raise ``ValueError`` when ``template`` is not safe to register."""

    if not template.id.strip():
        raise ValueError("Template id is required")
    if not template.title.strip():
        raise ValueError(f"Template '{template.id}' requires a title")

    undeclared = body_placeholders(template.body) - set(template.variables)
    if undeclared:
        names = ", ".join(sorted(undeclared))
        raise ValueError(
            f"Template '{template.id}' uses undeclared variables: {names}"
        )

    if any(not isinstance(step, int) or step < 0 for step in template.vibration):
        raise ValueError(
            f"Template '{template.id}' vibration must contain non-negative milliseconds"
        )

    action_ids = [action.action for action in template.actions]
    if len(action_ids) != len(set(action_ids)):
        raise ValueError(f"Template '{template.id}' declares duplicated actions")


def render_body(template: NotificationTemplate, metadata: Mapping[str, Any]) -> str:
    """Interpolate ``metadata`` into the template body.

    Placeholders without a matching metadata key are left untouched.
    """

    def _replace(match: re.Match[str]) -> str:
        key = match.group(1)
        if key in metadata and metadata[key] is not None:
            return str(metadata[key])
        return match.group(0)

    return _PLACEHOLDER_PATTERN.sub(_replace, template.body)


class TemplateCatalog(Mapping[str, NotificationTemplate]):
    """Read-only mapping of template id to :class:`NotificationTemplate`.

    Templates are validated once when registered so render sites can trust
    the metadata schema they declare.
    """

    def __init__(self, templates: Iterable[NotificationTemplate] | None = None) -> None:
        self._templates: dict[str, NotificationTemplate] = {}
        for template in DEFAULT_TEMPLATES if templates is None else templates:
            self._register(template)

    def _register(self, template: NotificationTemplate) -> None:
        validate_template(template)
        if template.id in self._templates:
            raise ValueError(f"Template '{template.id}' is already registered")
        self._templates[template.id] = template

    def __getitem__(self, template_id: str) -> NotificationTemplate:
        return self._templates[template_id]

    def __iter__(self) -> Iterator[str]:
        return iter(self._templates)

    def __len__(self) -> int:
        return len(self._templates)

    def resolve(self, template_id: str | None) -> NotificationTemplate | None:
        if not template_id:
            return None
        return self._templates.get(template_id)


__all__ = [
    "DEFAULT_TEMPLATES",
    "TemplateCatalog",
    "body_placeholders",
    "render_body",
    "validate_template",
]

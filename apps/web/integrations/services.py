"""
Webhook subscription lifecycle for client connections.

The provider is the source of truth; local WebhookSubscription rows are a
cache of handles so subscriptions can be deleted or recreated later.
"""

import logging
import secrets
from dataclasses import dataclass, field

from django.conf import settings
from django.core.exceptions import ImproperlyConfigured
from django.db.models import QuerySet
from django.utils import timezone

from outreach_schemas import (
    DEFAULT_EVENTS,
    CalendlyWebhookSubscription,
    ScopeTarget,
    SubscriptionScope,
)

from apps.web.core.exceptions import ConflictError
from apps.web.core.models import ClientConnection
from apps.web.integrations.calendly import CalendlyClient
from apps.web.integrations.models import WebhookSubscription

logger = logging.getLogger(__name__)


@dataclass
class SubscriptionDrift:
    """Difference between local handles and provider state for one client."""

    client_id: int
    missing_remote: list[str] = field(default_factory=list)
    unknown_remote: list[str] = field(default_factory=list)

    @property
    def has_drift(self) -> bool:
        return bool(self.missing_remote or self.unknown_remote)


def onboard_client(
    name: str,
    calendly_token: str,
    *,
    access_token: str = "",
    timezone_name: str = "UTC",
    discord_webhook_url: str = "",
    slack_channel_id: str = "",
    watched_event_types: list[str] | None = None,
    subscribe: bool = True,
) -> tuple[ClientConnection, WebhookSubscription | None]:
    """
    Create a client connection and register its relay webhook.

    The Calendly token is checked against the provider before anything is
    stored, and the user/org URIs it resolves to are saved with the
    connection. When no access token is given one is generated.

    If the provider already holds a subscription for our callback URL it is
    adopted. If subscribing fails the connection is kept and the error
    propagates; sync_calendly_subscriptions --fix subscribes it later.

    Raises:
        ConflictError: The access token is already taken.
        AuthError: The Calendly token was rejected.
        ValidationError: A connection field is invalid.
    """
    access_token = access_token or secrets.token_urlsafe(24)
    if ClientConnection.objects.filter(access_token=access_token).exists():
        raise ConflictError("Access token is already in use")

    with CalendlyClient(calendly_token) as calendly:
        user = calendly.get_current_user()

    connection = ClientConnection(
        name=name,
        access_token=access_token,
        calendly_token=calendly_token,
        calendly_user_uri=user.uri,
        calendly_org_uri=user.current_organization,
        timezone=timezone_name,
        discord_webhook_url=discord_webhook_url,
        slack_channel_id=slack_channel_id,
        watched_event_types=watched_event_types or [],
    )
    connection.full_clean()
    connection.save()
    logger.info("Onboarded client %s (%s)", connection.pk, name)

    if not subscribe:
        return connection, None

    try:
        subscription = subscribe_client(connection)
    except ConflictError:
        subscription = recreate_subscription(connection)
    return connection, subscription


def subscribe_client(
    connection: ClientConnection,
    scope: SubscriptionScope = SubscriptionScope.USER,
) -> WebhookSubscription:
    """
    Register the relay webhook for a client and remember its handle.

    Raises:
        ConflictError: The client already has an active subscription for
            this scope, or the provider reports one exists.
        AuthError: The client's provider token was rejected.
    """
    if _active_subscriptions(connection, scope).exists():
        raise ConflictError(
            f"Client {connection.pk} already has an active {scope.value} subscription",
            provider="calendly",
        )

    callback_url = _callback_url()
    with CalendlyClient(connection.calendly_token) as calendly:
        _ensure_provider_identity(connection, calendly)
        target = _scope_target(connection, scope)
        remote = calendly.create_subscription(
            target,
            callback_url,
            DEFAULT_EVENTS,
            signing_key=settings.CALENDLY_SIGNING_KEY or None,
        )

    subscription = _store_subscription(connection, remote, target)
    logger.info("Subscribed client %s (%s)", connection.pk, subscription.uri)
    return subscription


def unsubscribe_client(connection: ClientConnection) -> int:
    """
    Delete every active provider subscription of a client.

    Idempotent: subscriptions already gone on the provider side count as
    deleted. Returns the number of local handles deactivated.
    """
    active = list(WebhookSubscription.objects.filter(client=connection, is_active=True))
    if not active:
        return 0

    with CalendlyClient(connection.calendly_token) as calendly:
        for subscription in active:
            calendly.delete_subscription(subscription.uri)
            _deactivate(subscription)

    logger.info("Unsubscribed client %s (%d handles)", connection.pk, len(active))
    return len(active)


def recreate_subscription(
    connection: ClientConnection,
    scope: SubscriptionScope = SubscriptionScope.USER,
) -> WebhookSubscription:
    """
    Replace a client's subscription with a fresh one.

    If the provider reports the subscription already exists, the existing
    subscription pointing at our callback URL is adopted instead.
    """
    callback_url = _callback_url()
    with CalendlyClient(connection.calendly_token) as calendly:
        for subscription in _active_subscriptions(connection, scope):
            calendly.delete_subscription(subscription.uri)
            _deactivate(subscription)

        _ensure_provider_identity(connection, calendly)
        target = _scope_target(connection, scope)
        try:
            remote = calendly.create_subscription(
                target,
                callback_url,
                DEFAULT_EVENTS,
                signing_key=settings.CALENDLY_SIGNING_KEY or None,
            )
        except ConflictError:
            logger.info(
                "Subscription exists for client %s, looking up existing handle",
                connection.pk,
            )
            existing = _find_by_callback(
                calendly.list_subscriptions(target), callback_url
            )
            if existing is None:
                raise
            remote = existing

    subscription = _store_subscription(connection, remote, target)
    logger.info("Recreated subscription for client %s (%s)", connection.pk, remote.uri)
    return subscription


def check_subscription_drift(connection: ClientConnection) -> SubscriptionDrift:
    """Compare local active handles with what the provider reports."""
    drift = SubscriptionDrift(client_id=connection.pk)
    local = list(WebhookSubscription.objects.filter(client=connection, is_active=True))
    local_uris = {subscription.uri for subscription in local}
    scopes = {SubscriptionScope(subscription.scope) for subscription in local}
    scopes.add(SubscriptionScope.USER)

    callback_url = settings.CALENDLY_WEBHOOK_CALLBACK_URL
    remote: list[CalendlyWebhookSubscription] = []
    with CalendlyClient(connection.calendly_token) as calendly:
        if not connection.calendly_org_uri:
            user = calendly.get_current_user()
            target_org, target_user = user.current_organization, user.uri
        else:
            target_org = connection.calendly_org_uri
            target_user = connection.calendly_user_uri
        for scope in sorted(scopes, key=lambda s: s.value):
            target = ScopeTarget(
                scope=scope,
                organization_uri=target_org,
                user_uri=target_user if scope == SubscriptionScope.USER else None,
            )
            remote.extend(calendly.list_subscriptions(target))

    remote_uris = {
        item.uri
        for item in remote
        if item.state == "active"
        and (not callback_url or item.callback_url == callback_url)
    }
    drift.missing_remote = sorted(local_uris - remote_uris)
    drift.unknown_remote = sorted(remote_uris - local_uris)

    if drift.has_drift:
        logger.warning(
            "Subscription drift for client %s: missing=%s unknown=%s",
            connection.pk,
            drift.missing_remote,
            drift.unknown_remote,
        )
    return drift


# =============================================================================
# Helpers
# =============================================================================


def _callback_url() -> str:
    callback_url: str = settings.CALENDLY_WEBHOOK_CALLBACK_URL
    if not callback_url:
        raise ImproperlyConfigured("CALENDLY_WEBHOOK_CALLBACK_URL is not set")
    return callback_url


def _active_subscriptions(
    connection: ClientConnection, scope: SubscriptionScope
) -> QuerySet[WebhookSubscription]:
    return WebhookSubscription.objects.filter(
        client=connection, scope=scope.value, is_active=True
    )


def _ensure_provider_identity(
    connection: ClientConnection, calendly: CalendlyClient
) -> None:
    """Fill in user/org URIs from the token on first subscription."""
    if connection.calendly_user_uri and connection.calendly_org_uri:
        return

    user = calendly.get_current_user()
    connection.calendly_user_uri = user.uri
    connection.calendly_org_uri = user.current_organization
    connection.save(
        update_fields=["calendly_user_uri", "calendly_org_uri", "updated_at"]
    )
    logger.info("Resolved Calendly identity for client %s", connection.pk)


def _scope_target(
    connection: ClientConnection, scope: SubscriptionScope
) -> ScopeTarget:
    return ScopeTarget(
        scope=scope,
        organization_uri=connection.calendly_org_uri,
        user_uri=(
            connection.calendly_user_uri if scope == SubscriptionScope.USER else None
        ),
    )


def _find_by_callback(
    subscriptions: list[CalendlyWebhookSubscription], callback_url: str
) -> CalendlyWebhookSubscription | None:
    for subscription in subscriptions:
        if subscription.callback_url == callback_url:
            return subscription
    return None


def _store_subscription(
    connection: ClientConnection,
    remote: CalendlyWebhookSubscription,
    target: ScopeTarget,
) -> WebhookSubscription:
    scope_uri = target.user_uri if target.scope == SubscriptionScope.USER else None
    return WebhookSubscription.objects.create(
        client=connection,
        uri=remote.uri,
        callback_url=remote.callback_url,
        scope=target.scope.value,
        scope_uri=scope_uri or target.organization_uri,
        events=remote.events,
    )


def _deactivate(subscription: WebhookSubscription) -> None:
    subscription.is_active = False
    subscription.deactivated_at = timezone.now()
    subscription.save(update_fields=["is_active", "deactivated_at", "updated_at"])

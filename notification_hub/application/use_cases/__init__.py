"""Application use cases.

Database-backed helpers are imported from their modules
(:mod:`.push_subscriptions`, :mod:`.notifications.events`,
:mod:`.notifications.queries`) so that importing the notification core
stays free of the persistence layer.
"""

"""Accessors for the objects the root command stores on the click context."""

import click

from famledger.config import Settings
from famledger.database.base import Database
from famledger.domain.entities import OwnerScope
from famledger.domain.events import EventBus
from famledger.domain.household import resolve_owner_scope


def get_db(ctx: click.Context) -> Database:
    return ctx.obj["db"]


def get_settings(ctx: click.Context) -> Settings:
    return ctx.obj["settings"]


def get_events(ctx: click.Context) -> EventBus:
    return ctx.obj["events"]


def get_user(ctx: click.Context) -> str:
    return get_settings(ctx).user


def get_scope(ctx: click.Context) -> OwnerScope:
    """Owner scope of the current user, resolved once per command."""
    if "scope" not in ctx.obj:
        ctx.obj["scope"] = resolve_owner_scope(get_db(ctx), get_user(ctx))
    return ctx.obj["scope"]

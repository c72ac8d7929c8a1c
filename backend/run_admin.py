#!/usr/bin/env python3
"""
Operator commands for the Mindcare platform.

Runs directly against the configured identity directory and document
store, outside the HTTP surface. Actions are recorded in the audit trail
as performed by ``operator``.

Usage:
    python run_admin.py create-admin admin@example.com --password ... --name "Ops"
    python run_admin.py check-claims <uid>
    python run_admin.py verify-therapist <uid>
    python run_admin.py unverify-therapist <uid>
    python run_admin.py reconcile [--delete]
    python run_admin.py expire-invitations
"""

import argparse
import asyncio
import getpass
import logging
import sys

from rich.console import Console
from rich.table import Table

from api.dependencies import ServiceContainer
from modules.identity.models import ClaimSet
from shared.config import get_settings
from shared.exceptions import MindcareError
from shared.models import AuthenticatedUser, Role

console = Console()

OPERATOR = AuthenticatedUser(
    id="operator",
    email="operator@mindcare.app",
    email_verified=True,
    role=Role.ADMIN,
    is_verified=True,
)


async def create_admin(container: ServiceContainer, args: argparse.Namespace) -> None:
    password = args.password or getpass.getpass("Password: ")
    uid, created = await container.provisioning.create_admin(
        args.email, password, args.name or args.email.split("@")[0]
    )
    verb = "Created" if created else "Promoted existing account to"
    console.print(f"[green]✓[/green] {verb} admin [cyan]{uid}[/cyan]")


async def check_claims(container: ServiceContainer, args: argparse.Namespace) -> None:
    claims = await container.claims.get_claims(args.uid)
    profile = container.users.get(args.uid)

    table = Table(title=f"Claims for {args.uid}")
    table.add_column("Claim", style="cyan")
    table.add_column("Value")
    for key, value in claims.to_claims().items():
        table.add_row(key, str(value))
    console.print(table)

    if profile is None:
        console.print("[yellow]No user profile exists for this principal.[/yellow]")
    elif claims.role != profile.role:
        console.print(
            f"[yellow]Warning:[/yellow] profile role is {profile.role.value} "
            f"but the role claim is {claims.role.value if claims.role else 'unset'}"
        )


async def set_verification(
    container: ServiceContainer,
    args: argparse.Namespace,
    verified: bool,
) -> None:
    claims = await container.claims.set_custom_claims(
        OPERATOR, args.uid, ClaimSet(role=Role.THERAPIST, is_verified=verified)
    )
    state = "verified" if claims.is_verified else "unverified"
    console.print(f"[green]✓[/green] Therapist [cyan]{args.uid}[/cyan] is now {state}")


async def reconcile(container: ServiceContainer, args: argparse.Namespace) -> None:
    report = await container.provisioning.reconcile_orphans(OPERATOR, delete=args.delete)
    if not report.orphans:
        console.print("[green]No orphaned principals found.[/green]")
        return

    table = Table(title="Orphaned Principals")
    table.add_column("UID", style="cyan")
    table.add_column("Email")
    table.add_column("Created At")
    for orphan in report.orphans:
        created_at = orphan.created_at.strftime("%Y-%m-%d %H:%M:%S") if orphan.created_at else ""
        table.add_row(orphan.uid, orphan.email, created_at)
    console.print(table)
    if args.delete:
        console.print(f"[green]✓[/green] Deleted {report.deleted} principal(s)")
    else:
        console.print("Run again with [bold]--delete[/bold] to remove them.")


async def expire_invitations(container: ServiceContainer, args: argparse.Namespace) -> None:
    expired = await container.invitations.expire_stale()
    console.print(f"[green]✓[/green] Marked {expired} invitation(s) as expired")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Mindcare operator commands")
    commands = parser.add_subparsers(dest="command", required=True)

    p = commands.add_parser("create-admin", help="Create an admin or promote an existing account")
    p.add_argument("email")
    p.add_argument("--password", help="Prompted for when omitted")
    p.add_argument("--name", help="Display name")
    p.set_defaults(handler=create_admin)

    p = commands.add_parser("check-claims", help="Show a principal's current claims")
    p.add_argument("uid")
    p.set_defaults(handler=check_claims)

    p = commands.add_parser("verify-therapist", help="Mark a therapist as verified")
    p.add_argument("uid")
    p.set_defaults(handler=lambda c, a: set_verification(c, a, True))

    p = commands.add_parser("unverify-therapist", help="Revoke a therapist's verification")
    p.add_argument("uid")
    p.set_defaults(handler=lambda c, a: set_verification(c, a, False))

    p = commands.add_parser("reconcile", help="Report principals without a profile")
    p.add_argument("--delete", action="store_true", help="Delete the orphans found")
    p.set_defaults(handler=reconcile)

    p = commands.add_parser("expire-invitations", help="Expire pending invitations past their TTL")
    p.set_defaults(handler=expire_invitations)

    return parser


def main() -> None:
    args = build_parser().parse_args()
    settings = get_settings()
    logging.basicConfig(
        level=getattr(logging, settings.log_level.upper(), logging.INFO),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    container = ServiceContainer(settings=settings)
    try:
        asyncio.run(args.handler(container, args))
    except MindcareError as e:
        console.print(f"[red]Error ({e.status}):[/red] {e.message}")
        sys.exit(1)


if __name__ == "__main__":
    main()

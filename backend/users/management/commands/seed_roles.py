import os

import pandas as pd
from django.core.management.base import BaseCommand, CommandError
from django.db import transaction
from rich.console import Console
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from users.models import Role, Permission, RolePermission

META_COLUMNS = ("resource", "action", "description")


def _is_enabled(value):
    if isinstance(value, bool):
        return value
    if isinstance(value, str):
        return value.strip().upper() == "TRUE"
    return False


def _role_title(column):
    return column.replace("_", " ").title()


class Command(BaseCommand):
    help = 'Seed roles and permissions from the permissions matrix CSV (idempotent)'

    def __init__(self, *args, **kwargs):
        super().__init__(*args, **kwargs)
        self.console = Console()

    def add_arguments(self, parser):
        parser.add_argument(
            '--file',
            type=str,
            default=None,
            help='Path to the permissions CSV file'
        )

    def handle(self, *args, **options):
        self.console.print(Panel.fit(
            "[bold blue]Resource Planner - Role & Permission Seeder[/bold blue]",
            border_style="blue"
        ))

        csv_file = options['file'] or os.path.join(
            os.path.dirname(os.path.dirname(__file__)), 'permissions_matrix.csv'
        )
        if not os.path.exists(csv_file):
            raise CommandError(f"CSV file not found: {csv_file}")

        matrix = pd.read_csv(csv_file, dtype=str).fillna("")
        role_columns = [c for c in matrix.columns if c not in META_COLUMNS]
        self.console.print(f"[cyan]Found roles:[/cyan] {', '.join(_role_title(c) for c in role_columns)}")

        permission_entries = {}
        role_permissions = {column: set() for column in role_columns}
        for row in matrix.to_dict(orient="records"):
            key = f"{row['resource']}.{row['action']}"
            permission_entries[key] = row.get("description") or f"{row['action'].title()} {row['resource']}"
            for column in role_columns:
                if _is_enabled(row.get(column)):
                    role_permissions[column].add(key)

        stats = {"roles_created": 0, "permissions_created": 0, "assigned": 0, "removed": 0}

        with transaction.atomic():
            roles = {}
            for column in role_columns:
                title = _role_title(column)
                role, created = Role.objects.get_or_create(
                    role_name=title,
                    defaults={'description': f'{title} role with system-defined permissions'}
                )
                roles[column] = role
                if created:
                    stats["roles_created"] += 1
                    self.console.print(f"[green]✓ Created role:[/green] {title}")
                else:
                    self.console.print(f"[yellow]• Role exists:[/yellow] {title}")

            permissions = {}
            for key, description in permission_entries.items():
                permission, created = Permission.objects.get_or_create(
                    permission_key=key,
                    defaults={'description': description}
                )
                if not created and description and permission.description != description:
                    permission.description = description
                    permission.save(update_fields=["description", "updated_at"])
                permissions[key] = permission
                if created:
                    stats["permissions_created"] += 1
                    self.console.print(f"[green]✓ Created permission:[/green] {key}")

            for column, wanted in role_permissions.items():
                role = roles[column]
                current = set(
                    RolePermission.objects.filter(role=role).values_list('permission__permission_key', flat=True)
                )
                for key in sorted(wanted - current):
                    RolePermission.objects.get_or_create(role=role, permission=permissions[key])
                    stats["assigned"] += 1
                    self.console.print(f"[green]✓ Assigned[/green] {key} [green]to[/green] {role.role_name}")
                for key in sorted(current - wanted):
                    RolePermission.objects.filter(role=role, permission__permission_key=key).delete()
                    stats["removed"] += 1
                    self.console.print(f"[red]✗ Removed[/red] {key} [red]from[/red] {role.role_name}")

        summary = Text()
        summary.append("SEEDING COMPLETED SUCCESSFULLY!\n\n", style="bold green")
        summary.append(f"Roles created: {stats['roles_created']}\n", style="green")
        summary.append(f"Permissions created: {stats['permissions_created']}\n", style="green")
        summary.append(f"Role-permission assignments added: {stats['assigned']}\n", style="green")
        summary.append(f"Role-permission assignments removed: {stats['removed']}", style="red")
        self.console.print(Panel(summary, title="Summary", border_style="green"))

        table = Table(title="Final Role Summary")
        table.add_column("Role", style="cyan", no_wrap=True)
        table.add_column("Total Permissions", style="magenta", justify="right")
        for role in roles.values():
            table.add_row(role.role_name, str(RolePermission.objects.filter(role=role).count()))
        self.console.print(table)

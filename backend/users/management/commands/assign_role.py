from django.core.management.base import BaseCommand, CommandError
from rich.console import Console

from allocation.models import Resource
from users.models import User, Role


class Command(BaseCommand):
    help = 'Assign or remove roles from users, optionally linking them to a resource'

    def __init__(self, *args, **kwargs):
        super().__init__(*args, **kwargs)
        self.console = Console()

    def add_arguments(self, parser):
        parser.add_argument('username', type=str, help='Username of the account')
        parser.add_argument('role', type=str, help='Role name to assign or remove')
        parser.add_argument(
            '--remove',
            action='store_true',
            help='Remove the role instead of assigning it',
        )
        parser.add_argument(
            '--resource-email',
            type=str,
            default=None,
            help='Link the user to the resource with this email',
        )

    def handle(self, *args, **options):
        username = options['username']
        role_name = options['role']

        try:
            user = User.objects.get(username=username)
        except User.DoesNotExist:
            raise CommandError(f'User "{username}" does not exist')

        if not Role.objects.filter(role_name=role_name).exists():
            available_roles = ', '.join(Role.objects.values_list('role_name', flat=True))
            raise CommandError(f'Role "{role_name}" does not exist. Available roles: {available_roles}')

        if options['remove']:
            if user.remove_role(role_name):
                self.console.print(f"[green]✓ Successfully removed role '{role_name}' from user '{username}'[/green]")
            else:
                self.console.print(f"[yellow]• User '{username}' does not have active role '{role_name}'[/yellow]")
        else:
            try:
                user.assign_role(role_name)
            except ValueError as e:
                raise CommandError(str(e))
            self.console.print(f"[green]✓ Successfully assigned role '{role_name}' to user '{username}'[/green]")

        if options['resource_email']:
            try:
                resource = Resource.objects.get(email__iexact=options['resource_email'])
            except Resource.DoesNotExist:
                raise CommandError(f'Resource with email "{options["resource_email"]}" does not exist')
            user.resource = resource
            user.save(update_fields=['resource', 'updated_at'])
            self.console.print(f"[green]✓ Linked '{username}' to resource {resource.name}[/green]")

        current_roles = [role.role_name for role in user.get_user_roles()]
        self.console.print(f"[cyan]Current roles for {username}: {', '.join(current_roles) if current_roles else 'None'}[/cyan]")

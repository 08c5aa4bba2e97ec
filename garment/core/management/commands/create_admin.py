"""
Create an admin account, or promote an existing account to admin
"""
from django.contrib.auth import get_user_model
from django.core.management.base import BaseCommand, CommandError

from garment.core.roles import Role


class Command(BaseCommand):
    help = 'Create an admin account or promote an existing user to admin'

    def add_arguments(self, parser):
        parser.add_argument('email', help='Email address of the admin account')
        parser.add_argument('--name', default='Administrator', help='Display name for a new account')
        parser.add_argument(
            '--password',
            help='Password for a new account (required when the account does not exist)',
        )
        parser.add_argument(
            '--superuser',
            action='store_true',
            help='Also grant Django admin site access',
        )

    def handle(self, *args, **options):
        User = get_user_model()
        email = User.objects.normalize_email(options['email'])
        superuser = options['superuser']

        user = User.objects.filter(email__iexact=email).first()
        if user is None:
            if not options['password']:
                raise CommandError(f"No account for {email}; pass --password to create one")
            user = User.objects.create_user(
                email=email,
                password=options['password'],
                name=options['name'],
                role=Role.ADMIN.value,
                is_account_verified=True,
                is_staff=superuser,
                is_superuser=superuser,
            )
            self.stdout.write(self.style.SUCCESS(f"Created admin account {email}"))
            return

        if user.role == Role.ADMIN.value and (not superuser or user.is_superuser):
            self.stdout.write(self.style.WARNING(f"{user.email} is already an admin"))
            return

        previous_role = user.role
        user.role = Role.ADMIN.value
        if superuser:
            user.is_staff = True
            user.is_superuser = True
        user.save(update_fields=['role', 'is_staff', 'is_superuser', 'updated_at'])
        self.stdout.write(self.style.SUCCESS(f"Promoted {user.email} from {previous_role} to admin"))

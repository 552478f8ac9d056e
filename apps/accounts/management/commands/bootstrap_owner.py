from django.conf import settings
from django.contrib.auth import get_user_model
from django.core.management.base import BaseCommand, CommandError

from apps.accounts.models import UserRole


class Command(BaseCommand):
    help = "Promote the account configured in OWNER_EMAIL to the admin role"

    def add_arguments(self, parser):
        parser.add_argument("--email", default=None, help="Overrides OWNER_EMAIL")

    def handle(self, *args, **options):
        email = (options["email"] or settings.OWNER_EMAIL or "").strip()
        if not email:
            raise CommandError("OWNER_EMAIL is not configured.")

        users = get_user_model().objects.filter(email__iexact=email)
        if not users.exists():
            raise CommandError(f"No user with email {email}.")

        for user in users:
            if user.role == UserRole.ADMIN:
                self.stdout.write(self.style.SUCCESS(f"{user.username}: already admin"))
                continue
            user.role = UserRole.ADMIN
            user.save(update_fields=["role"])
            self.stdout.write(self.style.SUCCESS(f"{user.username}: promoted"))

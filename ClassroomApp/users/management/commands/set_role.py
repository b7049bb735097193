from django.core.management.base import BaseCommand, CommandError
from django.contrib.auth import get_user_model

from ClassroomApp.core.choices import UserRole

class Command(BaseCommand):
    help = "Set the role of a user by email (bootstraps the first administrator)."

    def add_arguments(self, parser):
        parser.add_argument("email")
        parser.add_argument("role", choices=[value.lower() for value in UserRole.values])

    def handle(self, *args, **options):
        User = get_user_model()
        user = User.objects.filter(email__iexact=options["email"]).first()
        if user is None:
            raise CommandError(f"No user with email {options['email']}")
        user.role = options["role"].upper()
        user.save(update_fields=["role", "updated_at"])
        self.stdout.write(self.style.SUCCESS(f"{user.email} is now {user.get_role_display()}"))

from django.core.management.base import BaseCommand

from patients.services.registration import expire_cards


class Command(BaseCommand):
    help = "Mark clinic cards past their expiry date as EXPIRED"

    def handle(self, *args, **options):
        n = expire_cards()
        self.stdout.write(self.style.SUCCESS(f"Expired {n} card(s)."))

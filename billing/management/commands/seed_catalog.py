"""
Starter service catalog. Prices are placeholders; set real prices through
the catalog endpoints or a CSV import.
"""

from decimal import Decimal

from django.conf import settings
from django.core.management.base import BaseCommand

from billing.enums import ServiceCategory as C
from billing.models import Service


def _catalog():
    return [
        (settings.CONSULTATION_SERVICE_CODE, "General Consultation", C.CONSULTATION, "200.00"),
        (settings.CARD_REGISTRATION_SERVICE_CODE, "Patient Card Registration", C.CARD, "100.00"),
        (settings.CARD_ACTIVATION_SERVICE_CODE, "Patient Card Renewal", C.CARD, "50.00"),
        ("LAB-CBC", "Complete Blood Count", C.LAB, "250.00"),
        ("LAB-BGL", "Blood Glucose", C.LAB, "80.00"),
        ("LAB-UA", "Urinalysis", C.LAB, "120.00"),
        ("LAB-WIDAL", "Widal Test", C.LAB, "150.00"),
        ("RAD-CXR", "Chest X-Ray", C.RADIOLOGY, "400.00"),
        ("RAD-USG-ABD", "Abdominal Ultrasound", C.RADIOLOGY, "600.00"),
        ("DEN-EXT", "Tooth Extraction", C.DENTAL, "500.00"),
        ("DEN-SCALE", "Scaling and Polishing", C.DENTAL, "700.00"),
        ("NRS-INJ", "Injection", C.NURSE, "50.00"),
        ("NRS-DRESS", "Wound Dressing", C.NURSE, "100.00"),
        ("NRS-IV", "IV Line Insertion", C.NURSE, "150.00"),
    ]


class Command(BaseCommand):
    help = "Create or refresh the starter service catalog"

    def add_arguments(self, parser):
        parser.add_argument("--keep-prices", action="store_true",
                            help="Leave prices of existing services untouched")

    def handle(self, *args, **options):
        created = updated = 0
        for code, name, category, price in _catalog():
            service = Service.objects.filter(code=code).first()
            if service is None:
                Service.objects.create(code=code, name=name, category=category, price=Decimal(price))
                created += 1
                self.stdout.write(self.style.SUCCESS(f"+ {code} {name}"))
                continue
            service.name, service.category, service.is_active = name, category, True
            if not options["keep_prices"]:
                service.price = Decimal(price)
            service.save()
            updated += 1
            self.stdout.write(self.style.WARNING(f"~ {code} {name} (updated)"))

        self.stdout.write(f"\nCreated {created}, updated {updated}.")

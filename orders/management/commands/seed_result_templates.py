from django.core.management.base import BaseCommand

from billing.models import Service
from orders.enums import OrderType
from orders.models import ResultTemplate

TEMPLATES = [
    {
        "code": "CBC",
        "name": "Complete Blood Count",
        "category": "Hematology",
        "order_type": OrderType.LAB,
        "services": ["LAB-CBC"],
        "fields": [
            {"name": "wbc", "label": "WBC", "type": "number", "min": 4, "max": 11, "step": 0.1,
             "unit": "x10^9/L", "normalRange": "4-11", "required": True},
            {"name": "rbc", "label": "RBC", "type": "number", "min": 4.2, "max": 6.1, "step": 0.01,
             "unit": "x10^12/L", "normalRange": "4.2-6.1", "required": True},
            {"name": "hgb", "label": "Hemoglobin", "type": "number", "min": 12, "max": 17.5, "step": 0.1,
             "unit": "g/dL", "normalRange": "12-17.5", "required": True},
            {"name": "plt", "label": "Platelets", "type": "number", "min": 150, "max": 450, "step": 1,
             "unit": "x10^9/L", "normalRange": "150-450", "required": True},
            {"name": "comment", "label": "Comment", "type": "textarea"},
        ],
    },
    {
        "code": "BGL",
        "name": "Blood Glucose",
        "category": "Chemistry",
        "order_type": OrderType.LAB,
        "services": ["LAB-BGL"],
        "fields": [
            {"name": "sample", "label": "Sample", "type": "select", "options": ["Fasting", "Random"], "required": True},
            {"name": "glucose", "label": "Glucose", "type": "number", "min": 70, "max": 140,
             "unit": "mg/dL", "normalRange": "70-140", "required": True},
        ],
    },
    {
        "code": "UA",
        "name": "Urinalysis",
        "category": "Chemistry",
        "order_type": OrderType.LAB,
        "services": ["LAB-UA"],
        "fields": [
            {"name": "color", "label": "Color", "type": "select", "options": ["Yellow", "Amber", "Red", "Clear"], "required": True},
            {"name": "ph", "label": "pH", "type": "number", "min": 4.5, "max": 8, "step": 0.5, "required": True},
            {"name": "protein", "label": "Protein", "type": "select", "options": ["Negative", "Trace", "+", "++", "+++"]},
            {"name": "microscopy", "label": "Microscopy", "type": "textarea"},
        ],
    },
    {
        "code": "CXR",
        "name": "Chest X-Ray Report",
        "category": "Chest",
        "order_type": OrderType.RADIOLOGY,
        "services": ["RAD-CXR"],
        "fields": [
            {"name": "findings", "label": "Findings", "type": "textarea", "required": True},
            {"name": "impression", "label": "Impression", "type": "text", "required": True},
        ],
    },
]


class Command(BaseCommand):
    help = "Create or refresh the built-in result templates and link them to catalog services"

    def handle(self, *args, **options):
        for t in TEMPLATES:
            t = dict(t)
            codes = t.pop("services")
            template, is_new = ResultTemplate.objects.update_or_create(code=t.pop("code"), defaults=t)
            services = list(Service.objects.filter(code__in=codes))
            template.services.set(services)
            missing = set(codes) - {s.code for s in services}
            verb = "created" if is_new else "updated"
            self.stdout.write(self.style.SUCCESS(f"{template.code}: {verb}, {len(services)} service(s)"))
            if missing:
                self.stdout.write(self.style.WARNING(f"  not in catalog (run seed_catalog): {', '.join(sorted(missing))}"))

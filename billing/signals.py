from django.dispatch import Signal

# Sent inside the paying transaction once a billing leaves the unsettled states.
# kwargs: billing, payment, actor
billing_settled = Signal()

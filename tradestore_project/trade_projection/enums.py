from django.db import models


class ExpiredFlag(models.TextChoices):
    ACTIVE = "ACTIVE", "Active"
    EXPIRED = "EXPIRED", "Expired"


class VersionDecision(models.TextChoices):
    ACCEPT = "ACCEPT", "Accept"
    REJECT = "REJECT", "Reject"


class OutcomeStatus(models.TextChoices):
    ACCEPTED = "ACCEPTED", "Accepted"
    REJECTED = "REJECTED", "Rejected"


class RejectionRule(models.TextChoices):
    MISSING_MATURITY = "MissingMaturity", "Missing Maturity Date"
    MATURITY_IN_PAST = "MaturityInPast", "Maturity Date In Past"
    LOWER_VERSION = "LowerVersion", "Lower Version"

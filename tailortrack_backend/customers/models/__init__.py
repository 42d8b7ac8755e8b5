from .customer import Customer
from .measurement_history import CustomerMeasurementHistory

__all__ = ["Customer", "CustomerMeasurementHistory"]

"""Read-only query selectors returning domain DTOs."""

from charges_kernel.selectors.defaults_selector import ChargesDefaultsSelector

__all__ = ["ChargesDefaultsSelector"]

from .gaussian import generate_gaussian_two_group

__all__ = ["generate_gaussian_two_group"]

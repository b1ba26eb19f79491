"""chatbridge - workspace-isolated memory and admission control for chat agents."""

__version__ = "0.1.0"

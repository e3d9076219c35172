"""Anonymous identity and version context for Azure PowerShell predictors."""

__version__ = "1.0.0"

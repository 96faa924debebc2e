from recetra.models.receipt import ReceiptModel
from recetra.models.reference import CategoryModel, OrganizationModel, TemplateModel

__all__ = ["ReceiptModel", "OrganizationModel", "CategoryModel", "TemplateModel"]

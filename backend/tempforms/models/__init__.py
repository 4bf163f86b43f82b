from tempforms.models.form import Form
from tempforms.models.form_response import FormResponse

__all__ = [
    "Form",
    "FormResponse",
]

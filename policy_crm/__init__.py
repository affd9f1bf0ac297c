"""Motor insurance policy CRM: PDF extraction pipeline and REST API."""

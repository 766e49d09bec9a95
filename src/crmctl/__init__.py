"""crmctl: personal network CRM: people, organizations, interactions, relationships."""

__version__ = "0.1.0"

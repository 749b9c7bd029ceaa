"""
connectors — card adapters for third-party enterprise systems.

Provides a generic connector framework that handles:
  • Token field publication (regexes for the hub's email scanner)
  • Card building from backend records, localized per request
  • Action routes translated one-to-one into backend mutations

Each backend (ServiceNow, GitLab, Salesforce, AirWatch, Coupa) is a
subclass of BaseConnector living in its own sub-package.
"""

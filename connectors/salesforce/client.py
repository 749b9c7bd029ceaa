"""
Salesforce REST calls — SOQL queries and sObject writes.
"""

from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional

from backends.base import BackendClient
from config.settings import config

logger = logging.getLogger(__name__)

QUERY_CONTACT = "SELECT name, account.name, MobilePhone FROM contact WHERE email = '{email}'"

QUERY_CONTACT_OPPORTUNITIES = (
    "SELECT Opportunity.Id FROM OpportunityContactRole "
    "WHERE contact.email = '{email}' AND Opportunity.StageName NOT IN ('Closed Lost', 'Closed Won')"
)

QUERY_OPPORTUNITY_INFO = (
    "SELECT id, name, CloseDate, NextStep, StageName, "
    "Account.name, Account.Owner.Name, FORMAT(Opportunity.amount), FORMAT(Opportunity.ExpectedRevenue), "
    "(SELECT User.Email from OpportunityTeamMembers), "
    "(SELECT InsertedBy.Name, Body from Feeds) FROM opportunity WHERE opportunity.id IN ('{ids}')"
)

QUERY_ACCOUNTS = (
    "SELECT email, account.id, account.name FROM contact "
    "WHERE email LIKE '%{domain}' AND account.owner.email = '{user_email}'"
)

QUERY_ACCOUNT_OPPORTUNITIES = "SELECT id, name FROM opportunity WHERE account.id = '{account_id}'"


def soql_escape(value: str) -> str:
    """Escape a value for use inside a single-quoted SOQL literal."""
    return value.replace("\\", "\\\\").replace("'", "\\'")


def _data_path(suffix: str) -> str:
    return f"/services/data/{config.salesforce_api_version}/{suffix.lstrip('/')}"


async def soql(backend: BackendClient, query: str) -> List[Dict[str, Any]]:
    """Run *query* and return its records."""
    payload = await backend.get_json(_data_path("query"), params={"q": query})
    return (payload or {}).get("records") or []


async def find_contact(backend: BackendClient, email: str) -> Optional[Dict[str, Any]]:
    records = await soql(backend, QUERY_CONTACT.format(email=soql_escape(email)))
    return records[0] if records else None


async def contact_opportunity_ids(backend: BackendClient, email: str) -> List[str]:
    """Open opportunities the contact with *email* plays a role in."""
    records = await soql(backend, QUERY_CONTACT_OPPORTUNITIES.format(email=soql_escape(email)))
    ids: List[str] = []
    for record in records:
        opp_id = (record.get("Opportunity") or {}).get("Id")
        if opp_id and opp_id not in ids:
            ids.append(opp_id)
    return ids


async def opportunity_details(backend: BackendClient, opportunity_ids: List[str]) -> List[Dict[str, Any]]:
    if not opportunity_ids:
        return []
    ids = "', '".join(soql_escape(i) for i in opportunity_ids)
    return await soql(backend, QUERY_OPPORTUNITY_INFO.format(ids=ids))


async def accounts_for_domain(
    backend: BackendClient,
    domain: str,
    user_email: str,
) -> List[Dict[str, Any]]:
    """
    Accounts owned by *user_email* that already have contacts in *domain*.

    Returned as distinct ``{"Id", "Name"}`` dicts, first-seen order.
    """
    records = await soql(
        backend,
        QUERY_ACCOUNTS.format(domain=soql_escape(domain), user_email=soql_escape(user_email)),
    )
    accounts: Dict[str, Dict[str, Any]] = {}
    for record in records:
        account = record.get("Account") or {}
        if account.get("Id") and account["Id"] not in accounts:
            accounts[account["Id"]] = {"Id": account["Id"], "Name": account.get("Name", "")}
    return list(accounts.values())


async def account_opportunities(backend: BackendClient, account_id: str) -> List[Dict[str, Any]]:
    return await soql(backend, QUERY_ACCOUNT_OPPORTUNITIES.format(account_id=soql_escape(account_id)))


async def create_contact(
    backend: BackendClient,
    account_id: str,
    email: str,
    last_name: str,
    first_name: Optional[str] = None,
) -> str:
    """Create a Contact under *account_id* and return its id."""
    body = {"AccountId": account_id, "Email": email, "LastName": last_name}
    if first_name:
        body["FirstName"] = first_name
    payload = await backend.send_json("POST", _data_path("sobjects/Contact"), body)
    contact_id = (payload or {}).get("id", "")
    logger.info("Salesforce contact %s created for account %s", contact_id, account_id)
    return contact_id


async def link_opportunity(backend: BackendClient, contact_id: str, opportunity_id: str) -> None:
    await backend.send_json(
        "POST",
        _data_path("sobjects/OpportunityContactRole"),
        {"ContactId": contact_id, "OpportunityId": opportunity_id},
    )


async def update_opportunity(backend: BackendClient, opportunity_id: str, fields: Dict[str, str]) -> None:
    await backend.send_json("PATCH", _data_path(f"sobjects/Opportunity/{opportunity_id}"), fields)
    logger.info("Salesforce opportunity %s updated: %s", opportunity_id, sorted(fields))

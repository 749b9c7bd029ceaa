"""
Card text for the ServiceNow connector.

``xx`` is a pseudo-locale: every string is wrapped so untranslated text
stands out when the hub requests it.
"""

MESSAGES = {
    "en": {
        "card.header.title": "[ServiceNow] Approval Request",
        "card.header.subtitle": "Request {number}",
        "card.body.description": "{created_by} is requesting approval for {number}.",
        "card.field.total.title": "Total",
        "card.field.created_by.title": "Requested by",
        "card.field.due_date.title": "Due by",
        "card.field.comments.title": "Comments",
        "card.field.items.title": "Items",
        "card.field.item.line": "{description} (qty {quantity}) — {price}",
        "card.action.approve.label": "Approve",
        "card.action.approve.completed": "Approved",
        "card.action.reject.label": "Reject",
        "card.action.reject.completed": "Rejected",
        "card.action.reject.reason.label": "Reason for rejection",
    },
    "xx": {
        "card.header.title": "xx[ServiceNow] Approval Requestxx",
        "card.header.subtitle": "xxRequest {number}xx",
        "card.body.description": "xx{created_by} is requesting approval for {number}.xx",
        "card.field.total.title": "xxTotalxx",
        "card.field.created_by.title": "xxRequested byxx",
        "card.field.due_date.title": "xxDue byxx",
        "card.field.comments.title": "xxCommentsxx",
        "card.field.items.title": "xxItemsxx",
        "card.field.item.line": "xx{description} (qty {quantity}) — {price}xx",
        "card.action.approve.label": "xxApprovexx",
        "card.action.approve.completed": "xxApprovedxx",
        "card.action.reject.label": "xxRejectxx",
        "card.action.reject.completed": "xxRejectedxx",
        "card.action.reject.reason.label": "xxReason for rejectionxx",
    },
}

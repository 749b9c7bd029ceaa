"""
Card text for the Coupa connector.
"""

MESSAGES = {
    "en": {
        "card.header.title": "[Coupa] Requisition #{id}",
        "card.header.subtitle": "Requested by {requester}",
        "card.body.description": "{requester} is asking for your approval of requisition #{id}.",
        "card.field.total.title": "Total",
        "card.field.total.value": "{amount} {currency}",
        "card.field.justification.title": "Justification",
        "card.field.submitted.title": "Submitted",
        "card.field.lines.title": "Items",
        "card.field.line.value": "{description} ({quantity} x {price})",
        "card.action.approve.label": "Approve",
        "card.action.approve.completed": "Approved",
        "card.action.approve.comment.label": "Comment (optional)",
        "card.action.reject.label": "Decline",
        "card.action.reject.completed": "Declined",
        "card.action.reject.reason.label": "Reason for declining",
    },
    "xx": {
        "card.header.title": "xx[Coupa] Requisition #{id}xx",
        "card.header.subtitle": "xxRequested by {requester}xx",
        "card.body.description": "xx{requester} is asking for your approval of requisition #{id}.xx",
        "card.field.total.title": "xxTotalxx",
        "card.field.total.value": "xx{amount} {currency}xx",
        "card.field.justification.title": "xxJustificationxx",
        "card.field.submitted.title": "xxSubmittedxx",
        "card.field.lines.title": "xxItemsxx",
        "card.field.line.value": "xx{description} ({quantity} x {price})xx",
        "card.action.approve.label": "xxApprovexx",
        "card.action.approve.completed": "xxApprovedxx",
        "card.action.approve.comment.label": "xxComment (optional)xx",
        "card.action.reject.label": "xxDeclinexx",
        "card.action.reject.completed": "xxDeclinedxx",
        "card.action.reject.reason.label": "xxReason for decliningxx",
    },
}

"""
Card text for the Salesforce connector.
"""

MESSAGES = {
    "en": {
        "contact.header.title": "[Salesforce] {name}",
        "contact.header.subtitle": "{account}",
        "contact.body.description": "{name} is a contact of {account}.",
        "contact.field.account.title": "Account",
        "contact.field.phone.title": "Mobile phone",
        "opportunity.header.title": "[Salesforce] Opportunity: {name}",
        "opportunity.header.subtitle": "{account}",
        "opportunity.body.description": "Open opportunity with {account}.",
        "opportunity.field.owner.title": "Account owner",
        "opportunity.field.close_date.title": "Close date",
        "opportunity.field.stage.title": "Stage",
        "opportunity.field.amount.title": "Amount",
        "opportunity.field.expected_revenue.title": "Expected revenue",
        "opportunity.field.next_step.title": "Next step",
        "opportunity.field.feed.title": "Recent activity",
        "opportunity.action.closedate.label": "Update close date",
        "opportunity.action.closedate.completed": "Close date updated",
        "opportunity.action.closedate.input.label": "New close date (YYYY-MM-DD)",
        "opportunity.action.nextstep.label": "Update next step",
        "opportunity.action.nextstep.completed": "Next step updated",
        "opportunity.action.nextstep.input.label": "Next step",
        "account.header.title": "[Salesforce] {account}",
        "account.header.subtitle": "{sender} is not a contact yet",
        "account.body.description": "{sender} shares a domain with {account}, one of your accounts.",
        "account.field.opportunities.title": "Opportunities",
        "account.action.add_contact.label": "Add contact",
        "account.action.add_contact.completed": "Contact added",
        "account.action.add_contact.first_name.label": "First name",
        "account.action.add_contact.last_name.label": "Last name",
    },
    "xx": {
        "contact.header.title": "xx[Salesforce] {name}xx",
        "contact.header.subtitle": "xx{account}xx",
        "contact.body.description": "xx{name} is a contact of {account}.xx",
        "contact.field.account.title": "xxAccountxx",
        "contact.field.phone.title": "xxMobile phonexx",
        "opportunity.header.title": "xx[Salesforce] Opportunity: {name}xx",
        "opportunity.header.subtitle": "xx{account}xx",
        "opportunity.body.description": "xxOpen opportunity with {account}.xx",
        "opportunity.field.owner.title": "xxAccount ownerxx",
        "opportunity.field.close_date.title": "xxClose datexx",
        "opportunity.field.stage.title": "xxStagexx",
        "opportunity.field.amount.title": "xxAmountxx",
        "opportunity.field.expected_revenue.title": "xxExpected revenuexx",
        "opportunity.field.next_step.title": "xxNext stepxx",
        "opportunity.field.feed.title": "xxRecent activityxx",
        "opportunity.action.closedate.label": "xxUpdate close datexx",
        "opportunity.action.closedate.completed": "xxClose date updatedxx",
        "opportunity.action.closedate.input.label": "xxNew close date (YYYY-MM-DD)xx",
        "opportunity.action.nextstep.label": "xxUpdate next stepxx",
        "opportunity.action.nextstep.completed": "xxNext step updatedxx",
        "opportunity.action.nextstep.input.label": "xxNext stepxx",
        "account.header.title": "xx[Salesforce] {account}xx",
        "account.header.subtitle": "xx{sender} is not a contact yetxx",
        "account.body.description": "xx{sender} shares a domain with {account}, one of your accounts.xx",
        "account.field.opportunities.title": "xxOpportunitiesxx",
        "account.action.add_contact.label": "xxAdd contactxx",
        "account.action.add_contact.completed": "xxContact addedxx",
        "account.action.add_contact.first_name.label": "xxFirst namexx",
        "account.action.add_contact.last_name.label": "xxLast namexx",
    },
}

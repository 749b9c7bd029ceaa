"""
Card text for the GitLab merge-request connector.
"""

MESSAGES = {
    "en": {
        "card.header.title": "[GitLab] {title}",
        "card.header.subtitle": "{namespace}/{project} !{iid}",
        "card.body.description": "{author} opened a merge request from {source} into {target}.",
        "card.field.repository.title": "Repository",
        "card.field.requester.title": "Requester",
        "card.field.state.title": "State",
        "card.field.state.opened": "Open",
        "card.field.state.merged": "Merged",
        "card.field.state.closed": "Closed",
        "card.field.state.locked": "Locked",
        "card.field.mergeable.title": "Merge status",
        "card.field.created.title": "Created",
        "card.field.description.title": "Description",
        "card.field.changes.title": "Changes",
        "card.field.changes.value": "{count} file(s) changed",
        "card.action.approve.label": "Approve",
        "card.action.approve.completed": "Approved",
        "card.action.comment.label": "Comment",
        "card.action.comment.completed": "Commented",
        "card.action.comment.input.label": "Comment",
        "card.action.merge.label": "Merge",
        "card.action.merge.completed": "Merged",
        "card.action.close.label": "Close",
        "card.action.close.completed": "Closed",
    },
    "xx": {
        "card.header.title": "xx[GitLab] {title}xx",
        "card.header.subtitle": "xx{namespace}/{project} !{iid}xx",
        "card.body.description": "xx{author} opened a merge request from {source} into {target}.xx",
        "card.field.repository.title": "xxRepositoryxx",
        "card.field.requester.title": "xxRequesterxx",
        "card.field.state.title": "xxStatexx",
        "card.field.state.opened": "xxOpenxx",
        "card.field.state.merged": "xxMergedxx",
        "card.field.state.closed": "xxClosedxx",
        "card.field.state.locked": "xxLockedxx",
        "card.field.mergeable.title": "xxMerge statusxx",
        "card.field.created.title": "xxCreatedxx",
        "card.field.description.title": "xxDescriptionxx",
        "card.field.changes.title": "xxChangesxx",
        "card.field.changes.value": "xx{count} file(s) changedxx",
        "card.action.approve.label": "xxApprovexx",
        "card.action.approve.completed": "xxApprovedxx",
        "card.action.comment.label": "xxCommentxx",
        "card.action.comment.completed": "xxCommentedxx",
        "card.action.comment.input.label": "xxCommentxx",
        "card.action.merge.label": "xxMergexx",
        "card.action.merge.completed": "xxMergedxx",
        "card.action.close.label": "xxClosexx",
        "card.action.close.completed": "xxClosedxx",
    },
}

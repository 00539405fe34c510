"""Webhook receiver resources.

Usage
-----
Import the GitLab resource for route registration::

    from raccoon.api.webhooks.resources import GitLabWebhookResource
"""

"""
Feature modules for the Mindcare backend.

- identity: principals and their claims in the identity directory
- claims: the claims propagator and the single claims writer
- invitations: the invitation ledger
- relationships: therapist-patient relationships and transfers
- profiles: user, therapist, and patient profile documents
- provisioning: account creation across all of the above
- auth: access token validation

A module exposes Protocol interfaces in interfaces.py; other modules and
the API container depend on those rather than on service.py.
"""

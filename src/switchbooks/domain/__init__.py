"""Domain layer for switchbooks application.

Services are imported from their own modules (``switchbooks.domain.ledger``
and so on); the database layer imports ``switchbooks.domain.entities`` and
would cycle back through this package otherwise.
"""

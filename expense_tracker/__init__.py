"""Console front end for the expense ledger."""

"""
tfruntask - Reference run task integration for HCP Terraform.

Receives run task callbacks for every stage of a Terraform run, collects the
run's data from the platform API onto local disk and reports a task result back.
"""

__version__ = "0.1.0"

"""
SAP Employee Basic Data Adapter

A RabbitMQ-triggered adapter that reads business users, their business role
assignments and employee basic data from the SAP C4C OData API and republishes
them as flat JSON records on an outbound queue.
"""

__version__ = "0.1.0"

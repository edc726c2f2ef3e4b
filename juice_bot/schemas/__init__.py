"""
Schemas Package for Juice Bot
=============================

Pydantic models used for API request validation and response
serialization.

Schema Organization:
--------------------
- **chat.py**: Message parsing and recording schemas
- **deliveries.py**: Recorded delivery schemas for the admin interface
- **directory.py**: Directory cache status schemas

Naming Conventions:
-------------------
- *Out: Response models (e.g., DeliveryOut) - what API returns
- *Request: Request bodies (e.g., ChatMessageRequest)
- *Response: Composite response structures (e.g., ChatMessageResponse)

Pydantic Configuration:
-----------------------
Models that are built from ORM objects use:

    model_config = ConfigDict(from_attributes=True)
"""

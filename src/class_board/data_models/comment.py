"""
Comment model.

Comments are embedded in their parent post and have no identity of their
own. The id is synthesized from the local wall clock, so two clients
commenting in the same millisecond can collide.
"""

from datetime import datetime

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


class Comment(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    id: str
    author_name: str
    content: str
    created_at: datetime | None = None

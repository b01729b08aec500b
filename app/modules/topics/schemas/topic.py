from pydantic import BaseModel

class Topic(BaseModel):
    id: str
    name: str

    class Config:
        from_attributes = True

class HotTopic(Topic):
    count: int

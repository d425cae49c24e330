from pydantic import BaseModel


class TokenData(BaseModel):
    """Claims taken from a verified identity-provider token."""
    subject: str | None = None
    email: str | None = None
    name: str | None = None
    picture: str | None = None

    def get_subject(self) -> str | None:
        if self.subject:
            return self.subject.strip() or None
        return None

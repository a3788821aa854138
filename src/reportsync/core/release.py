from typing import Annotated, Any, List, Optional

from pydantic import BaseModel, BeforeValidator, ConfigDict, Field


def _none_as_empty(value: Any) -> Any:
    return [] if value is None else value


EmptyIfNone = BeforeValidator(_none_as_empty)


class ReleaseModel(BaseModel):
    # version and tag fields arrive as numbers from some releases
    model_config = ConfigDict(coerce_numbers_to_str=True)


class Program(ReleaseModel):
    id: int
    company_id: int = 0
    program_name: Optional[str] = None
    created_at: Optional[str] = None
    program_description: Optional[str] = None
    program_tag: Optional[str] = None
    is_active: bool = False
    program_hours: int = 0
    program_version: int = 0


class Subject(ReleaseModel):
    id: int
    company_id: int = 0
    subject_name: Optional[str] = None
    subject_description: Optional[str] = None
    subject_hours: int = 0
    subject_tag: Optional[str] = None
    subject_version: Optional[str] = None
    priority: int = 0


class Topic(ReleaseModel):
    id: int
    company_id: int = 0
    subject_id: int = 0
    topic_name: Optional[str] = None
    topic_hours: int = 0
    topic_description: Optional[str] = None
    topic_tag: Optional[str] = None
    priority: int = 0


class Lesson(ReleaseModel):
    id: int
    company_id: int = 0
    topic_id: int = 0
    lesson_name: Optional[str] = None
    lesson_description: Optional[str] = None
    lesson_tag: Optional[str] = None
    lesson_hours: int = 0
    priority: int = 0


class Resource(ReleaseModel):
    id: int
    company_id: int = 0
    topic_id: Optional[str] = None
    creator_id: int = 0
    creator_name: Optional[str] = None
    last_update: Optional[str] = None
    description: Optional[str] = None
    url_link: Optional[str] = None


class TopicWithLessons(ReleaseModel):
    topic: Optional[Topic] = None
    lessons: Annotated[List[Lesson], EmptyIfNone] = Field(default_factory=list)
    resources: Annotated[List[Resource], EmptyIfNone] = Field(default_factory=list)


class SubjectWithTopics(ReleaseModel):
    subject: Optional[Subject] = None
    topics: Annotated[List[TopicWithLessons], EmptyIfNone] = Field(default_factory=list)

    def topic_by_id(self, topic_id: int) -> Optional[Topic]:
        for entry in self.topics:
            if entry.topic is not None and entry.topic.id == topic_id:
                return entry.topic
        return None


class ReleaseContent(ReleaseModel):
    program: Optional[Program] = None
    subjects: Annotated[List[SubjectWithTopics], EmptyIfNone] = Field(default_factory=list)
    max_priority: int = 0


class Release(ReleaseModel):
    id: int
    program_id: int = 0
    company_id: int = 0
    created_at: Optional[str] = None
    created_by: int = 0
    version: int = 0
    sub_version: int = 0
    archived_at: Optional[str] = None
    archived_by: Optional[int] = None
    content: Optional[ReleaseContent] = None
    release_name: Optional[str] = None
    title: Optional[str] = None
    description: Optional[str] = None

    def subjects(self) -> List[Subject]:
        if self.content is None:
            return []
        return [entry.subject for entry in self.content.subjects if entry.subject is not None]

    def subject_entry(self, subject_id: int) -> Optional[SubjectWithTopics]:
        if self.content is None:
            return None
        for entry in self.content.subjects:
            if entry.subject is not None and entry.subject.id == subject_id:
                return entry
        return None


class ReleaseEnvelope(ReleaseModel):
    response_code: int = 0
    message: Optional[str] = None
    count: int = 0
    service_message: Optional[str] = None
    data: Optional[Release] = None

    @property
    def is_successful(self) -> bool:
        return self.response_code == 200 and self.data is not None

    def error_message(self) -> str:
        return self.service_message or self.message or "Invalid response format"

from pydantic import BaseModel, Field
from typing import Optional, Dict, Any

class ModelConfig(BaseModel):
    provider: str = "openai"
    name: str = "gpt-4o-mini"
    api_key: Optional[str] = None
    base_url: Optional[str] = None
    timeout_sec: int = 20
    candidates: int = Field(1, ge=1, description="Number of completions requested per call")
    parameters: Dict[str, Any] = Field(default_factory=dict)

class PromptConfig(BaseModel):
    template: str = "default.j2"
    template_dir: Optional[str] = None
    language: str = "en"
    max_tokens: int = Field(4000, gt=0, description="Prompts with more tokens than this are rejected")
    encoding: str = Field("cl100k_base", description="tiktoken encoding used to count prompt tokens")

class OutputConfig(BaseModel):
    error_placeholder: str = Field(
        "Error occurred while generating commit message",
        description="Written to the message destination when the backend fails",
    )

class UsageConfig(BaseModel):
    enabled: bool = Field(True, description="Whether to count successful generations")
    path: str = Field("~/.aicommits/usage.json", description="Usage counter file")


class HookConfig(BaseModel):
    enabled: bool = Field(True, description="Whether the git hook generates messages")
    no_overwrite: bool = Field(False, description="Leave commit message files that already have content alone")


class Config(BaseModel):
    model: ModelConfig = Field(default_factory=ModelConfig, description="LLM backend settings")
    prompt: PromptConfig = Field(default_factory=PromptConfig, description="Prompt template and token budget")
    output: OutputConfig = Field(default_factory=OutputConfig, description="Message destination settings")
    usage: UsageConfig = Field(default_factory=UsageConfig, description="Usage counter settings")
    hook: HookConfig = Field(default_factory=HookConfig, description="Git hook settings")

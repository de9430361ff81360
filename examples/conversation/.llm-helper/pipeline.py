"""
Example pipeline that sees the whole conversation.
"""
from langchain_core.prompts import ChatPromptTemplate, MessagesPlaceholder
from langchain_openai import ChatOpenAI


INPUT_KEY = "messages"


def build_chain(api_key: str):
    chat_model = ChatOpenAI(model="gpt-4o", api_key=api_key, temperature=0)
    prompt = ChatPromptTemplate.from_messages([
        ("system", "You are a patient reviewer. Point out bugs before style issues."),
        MessagesPlaceholder("messages"),
    ])
    return prompt | chat_model

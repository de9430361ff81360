"""
Example pipeline: a chat model that answers every request with "no".

Open examples/refuse-everything as the project to try it.
"""
from langchain_core.prompts import ChatPromptTemplate
from langchain_openai import ChatOpenAI


INPUT_KEY = "input"

SYSTEM_PROMPT = "You respond to every request with 'no', no matter what it is."


def build_chain(api_key: str):
    chat_model = ChatOpenAI(api_key=api_key, temperature=0)
    prompt = ChatPromptTemplate.from_messages([
        ("system", SYSTEM_PROMPT),
        ("user", "{input}"),
    ])
    return prompt | chat_model

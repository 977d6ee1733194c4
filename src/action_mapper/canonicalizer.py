from typing import List
from .models import PageObjectMethod
from .utils.naming import camel_to_words
from langchain_core.documents import Document

class MethodCanonicalizer:
    @staticmethod
    def to_text(method: PageObjectMethod) -> str:
        parts = [f"Method: {method.method_name} ({camel_to_words(method.method_name)})"]

        parts.append(f"Class: {method.class_name}")

        if method.parameters:
            parts.append(f"Parameters: {', '.join(method.parameters)}")

        if method.platform:
            parts.append(f"Platform: {method.platform}")

        if method.brand:
            parts.append(f"Brand: {method.brand}")

        if method.javadoc:
            parts.append(f"Description: {method.javadoc}")

        return ". ".join(parts) + "."

def build_documents(methods: List[PageObjectMethod]) -> List[Document]:
    """
    Build Document objects for the semantic method index.

    Metadata carries everything a Candidate needs so a search hit never
    has to go back to the source file.
    """
    documents: List[Document] = []

    for method in methods:
        text = MethodCanonicalizer.to_text(method)
        metadata = {
            "method_name": method.method_name,
            "class_name": method.class_name,
            "parameters": list(method.parameters),
            "return_type": method.return_type,
            "file": method.file,
            "platform": method.platform,
            "brand": method.brand,
            "javadoc": method.javadoc,
        }
        documents.append(Document(page_content=text, metadata=metadata))

    return documents

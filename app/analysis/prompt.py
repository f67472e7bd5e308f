from app.schemas.resumes import AnalysisRequest

ANALYZER_SYSTEM_PROMPT = "You are an expert resume analyzer. Return only valid JSON."

FEEDBACK_JSON_SCHEMA = """{
  "overallScore": <integer 0-100>,
  "ATS": {
    "score": <integer 0-100>,
    "tips": [
      {"type": "good" | "improve", "tip": "specific tip text"}
    ]
  },
  "toneAndStyle": {
    "score": <integer 0-100>,
    "tips": [
      {"type": "good" | "improve", "tip": "short title", "explanation": "detailed explanation"}
    ]
  },
  "content": {
    "score": <integer 0-100>,
    "tips": [
      {"type": "good" | "improve", "tip": "short title", "explanation": "detailed explanation"}
    ]
  },
  "structure": {
    "score": <integer 0-100>,
    "tips": [
      {"type": "good" | "improve", "tip": "short title", "explanation": "detailed explanation"}
    ]
  },
  "skills": {
    "score": <integer 0-100>,
    "tips": [
      {"type": "good" | "improve", "tip": "short title", "explanation": "detailed explanation"}
    ]
  }
}"""


def build_analysis_prompt(request: AnalysisRequest) -> str:
    sections = [
        "You are an expert ATS (Applicant Tracking System) and resume analysis specialist. "
        "Analyze this resume thoroughly and provide detailed, actionable feedback.",
        f"RESUME CONTENT:\n{request.resume_text}",
        "JOB DETAILS:\n"
        f"- Position: {request.job_title}\n"
        f"- Description: {request.job_description}",
        "ANALYSIS REQUIREMENTS:\n"
        "1. ATS: evaluate ATS compatibility (keywords, formatting, structure)\n"
        "2. toneAndStyle: assess tone and writing style (professional, clear, impactful)\n"
        "3. content: review content quality (achievements, quantifiable results, relevance)\n"
        "4. structure: analyze structure and organization\n"
        "5. skills: evaluate skills presentation and relevance to the role",
        "Give every category an integer score from 0 to 100 and 3-4 specific, actionable tips. "
        "Be honest - give low scores if the resume needs significant improvement. "
        f"Focus on how well the resume matches the {request.job_title} position.",
        "CRITICAL: Return ONLY one valid JSON object in exactly this format. "
        "Do not use markdown, code fences or any text outside the JSON object.",
        FEEDBACK_JSON_SCHEMA,
        "Include 3-4 tips per category. Return ONLY the JSON object.",
    ]
    return "\n\n".join(sections)

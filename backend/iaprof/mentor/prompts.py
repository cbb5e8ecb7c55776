# --- Persona compartilhada por todas as chamadas ---
mentor_system_instruction = """Você é o 'IAprof mentor', um super professor especialista em aprovação de alto rendimento.
Sua metodologia baseia-se no Princípio de Pareto (80/20): você foca nos 20% dos assuntos que representam 80% das questões nos últimos 10 anos de concursos.
Você conhece profundamente o perfil das bancas (FGV, Cebraspe, FCC, Vunesp, etc.) e o estilo do ENEM.
Seu tom é motivador, estratégico e focado em resultados rápidos e sólidos."""

# --- Disciplinas do concurso ---
course_subjects_prompt = """
Liste as {subjects_count} disciplinas/matérias mais importantes e recorrentes para o concurso/exame {course}{board_clause}.
Retorne apenas a lista com os nomes das disciplinas na chave "subjects".
"""

# --- Questão inédita ---
question_generation_prompt = """
Como IAprof mentor, gere uma questão de múltipla escolha inédita para: {course} ({board_context}).
Objetivo do aluno: "{goal}".
Disciplina alvo: {subject}.
A questão deve refletir exatamente o nível de complexidade e as "pegadinhas" típicas desta banca.

# FORMATO DA SAÍDA
- "options": as alternativas, na ordem de exibição.
- "correct_answer": o índice (começando em 0) da alternativa correta.
- "difficulty": exatamente "Fácil", "Médio" ou "Difícil".
"""

# --- Edital estratégico 80/20 ---
study_plan_prompt = """
Liste os {topics_count} tópicos mais recorrentes (Princípio 80/20) para o concurso {course} (Banca: {board}) {subject_clause}.

# FORMATO DA SAÍDA
Para cada tópico em "topics":
- "weight": importância de 1 a 100 baseada na recorrência histórica.
- "status": sempre "Pendente".
"""

# --- Conteúdo de fixação após um erro ---
fixation_prompt = """
O aluno errou uma questão de {subject} da banca {board}. Objetivo: "{goal}".
Enunciado da questão errada: "{question_text}"
Aplique o método 80/20 para explicar por que este erro é fatal e como evitá-lo.
1. Passo a passo estratégico ("step_by_step").
2. Conceito chave ("main_topic").
3. {fixation_count} questões de fixação no estilo da banca ("fixation_questions"), cada uma com "correct_answer" indicando o índice (começando em 0) da alternativa correta.
"""

# --- OCR de questão ---
ocr_solver_prompt = "Analise esta imagem, extraia a questão e forneça a resolução com foco no método 80/20."

# --- Redação ---
essay_image_prompt = (
    "Esta é uma redação manuscrita. Primeiro faça o OCR (transcrição completa) e depois avalie "
    "rigorosamente pelos critérios do ENEM (5 competências, de c1 a c5, cada uma de 0 a 200). "
    "Forneça o feedback em JSON."
)

essay_text_prompt = """
Avalie esta redação pelos critérios do ENEM (5 competências, de c1 a c5, cada uma de 0 a 200; nota total de 0 a 1000):

{essay_text}
"""

# --- Feedback final de mentoria (texto livre) ---
mentor_feedback_prompt = """
Dê o feedback final de mentoria para o aluno que busca "{goal}". Desempenho na sessão: {correct_count}/{total_count}.
Mencione o progresso dele no "Edital Estratégico 80/20" e encerre com uma frase de impacto para a aprovação.
"""

"""User-facing texts of the console (pt-BR)."""

FILL_ALL_FIELDS = "Por favor, preencha todos os campos"
FILL_ALL_PHONE_FIELDS = "Por favor, preencha todos os campos do telefone"
FILL_PROMPT = "Por favor, preencha o prompt do sistema"
ENTER_EMAIL = "Por favor, insira seu email"

SIGNUP_CHECK_EMAIL = "Verifique seu email para o link de confirmação!"
RESET_EMAIL_SENT = "Email de recuperação de senha enviado!"
PASSWORDS_DO_NOT_MATCH = "As senhas não coincidem"
PASSWORD_TOO_SHORT = "A senha deve ter pelo menos 6 caracteres"
PASSWORD_UPDATED = "Senha atualizada com sucesso!"

ENTRY_ADDED = "Entrada adicionada com sucesso!"
ENTRY_UPDATED = "Entrada atualizada com sucesso!"
ENTRY_DELETED = "Entrada excluída com sucesso!"
KNOWLEDGE_PUBLISHED = "Alterações salvas com sucesso!"
UNSAVED_CHANGES = "Existem alterações não salvas. Deseja sair mesmo assim?"

PROMPT_ADDED = "Prompt do sistema adicionado com sucesso!"
PROMPT_UPDATED = "Prompt do sistema atualizado com sucesso!"

PROFILE_UPDATED = "Perfil atualizado com sucesso!"
PROFILE_NOT_FOUND = "Perfil de usuário não encontrado. Por favor, entre em contato com o suporte."
WHATSAPP_SAVED = "Número de WhatsApp cadastrado com sucesso!"

RESET_MEMORY_SENT = "Solicitação enviada com sucesso!"
RESET_MEMORY_FAILED = "Erro ao enviar solicitação. Por favor, tente novamente."

FETCH_FAILED = "Erro ao buscar dados: {error}"
PROFILE_FETCH_FAILED = "Erro ao buscar perfil: {error}"

"""
Schema SQL completo para provisionamento de tenants.
Cada escritório recebe um schema próprio; ${schema} é substituído pelo
nome tenant_<uuid> no momento da criação.
"""

TENANT_SCHEMA_SQL = """
-- =====================================================
-- CLIENTES (CRM)
-- =====================================================
CREATE TABLE IF NOT EXISTS ${schema}.clients (
    id UUID PRIMARY KEY DEFAULT gen_random_uuid(),
    name VARCHAR(255) NOT NULL,
    organization VARCHAR(255),
    email VARCHAR(255),
    mobile VARCHAR(50) NOT NULL,
    country VARCHAR(100) NOT NULL,
    state VARCHAR(100) NOT NULL,
    address TEXT,
    city VARCHAR(100) NOT NULL,
    zip_code VARCHAR(20),
    budget DECIMAL(15,2) DEFAULT 0,
    currency VARCHAR(3) DEFAULT 'BRL',
    level VARCHAR(50),
    tags JSONB DEFAULT '[]',
    description TEXT,
    -- Dados jurídicos / previdenciários
    pis VARCHAR(20),
    cei VARCHAR(20),
    professional_title VARCHAR(100),
    marital_status VARCHAR(20),
    birth_date DATE,
    cpf VARCHAR(14),
    rg VARCHAR(20),
    inss_status VARCHAR(20),
    amount_paid DECIMAL(15,2) DEFAULT 0,
    referred_by VARCHAR(255),
    registered_by VARCHAR(255),
    status VARCHAR(20) DEFAULT 'active' CHECK (status IN ('active', 'inactive', 'pending')),
    created_at TIMESTAMP DEFAULT NOW(),
    updated_at TIMESTAMP DEFAULT NOW()
);

-- =====================================================
-- PROJETOS
-- =====================================================
CREATE TABLE IF NOT EXISTS ${schema}.projects (
    id UUID PRIMARY KEY DEFAULT gen_random_uuid(),
    title VARCHAR(255) NOT NULL,
    description TEXT,
    client_name VARCHAR(255) NOT NULL,
    client_id UUID REFERENCES ${schema}.clients(id) ON DELETE SET NULL,
    organization VARCHAR(255),
    contacts JSONB DEFAULT '[]',
    address TEXT,
    budget DECIMAL(15,2) DEFAULT 0,
    currency VARCHAR(3) DEFAULT 'BRL',
    status VARCHAR(20) DEFAULT 'contacted' CHECK (status IN ('contacted', 'proposal', 'won', 'lost')),
    start_date DATE NOT NULL,
    due_date DATE NOT NULL,
    tags JSONB DEFAULT '[]',
    assigned_to JSONB DEFAULT '[]',
    priority VARCHAR(20) DEFAULT 'medium' CHECK (priority IN ('low', 'medium', 'high', 'urgent')),
    progress INTEGER DEFAULT 0 CHECK (progress >= 0 AND progress <= 100),
    created_by VARCHAR(255),
    created_at TIMESTAMP DEFAULT NOW(),
    updated_at TIMESTAMP DEFAULT NOW(),
    notes TEXT,
    attachments JSONB DEFAULT '[]'
);

-- =====================================================
-- TAREFAS
-- =====================================================
CREATE TABLE IF NOT EXISTS ${schema}.tasks (
    id UUID PRIMARY KEY DEFAULT gen_random_uuid(),
    title VARCHAR(255) NOT NULL,
    description TEXT,
    start_date DATE NOT NULL,
    end_date DATE NOT NULL,
    status VARCHAR(20) DEFAULT 'not_started' CHECK (status IN ('not_started', 'in_progress', 'completed', 'on_hold', 'cancelled')),
    priority VARCHAR(20) DEFAULT 'medium' CHECK (priority IN ('low', 'medium', 'high', 'urgent')),
    assigned_to VARCHAR(255) NOT NULL,
    project_id UUID REFERENCES ${schema}.projects(id) ON DELETE SET NULL,
    project_title VARCHAR(255),
    client_id UUID REFERENCES ${schema}.clients(id) ON DELETE SET NULL,
    client_name VARCHAR(255),
    tags JSONB DEFAULT '[]',
    estimated_hours DECIMAL(8,2),
    actual_hours DECIMAL(8,2) DEFAULT 0,
    progress INTEGER DEFAULT 0 CHECK (progress >= 0 AND progress <= 100),
    created_at TIMESTAMP DEFAULT NOW(),
    updated_at TIMESTAMP DEFAULT NOW(),
    completed_at TIMESTAMP,
    notes TEXT,
    attachments JSONB DEFAULT '[]',
    subtasks JSONB DEFAULT '[]'
);

-- =====================================================
-- FLUXO DE CAIXA
-- =====================================================
CREATE TABLE IF NOT EXISTS ${schema}.cash_flow (
    id UUID PRIMARY KEY DEFAULT gen_random_uuid(),
    type VARCHAR(10) NOT NULL CHECK (type IN ('income', 'expense')),
    amount DECIMAL(15,2) NOT NULL,
    category_id VARCHAR(50) NOT NULL,
    category_name VARCHAR(255) NOT NULL,
    description TEXT NOT NULL,
    date DATE NOT NULL,
    payment_method VARCHAR(20),
    status VARCHAR(20) DEFAULT 'confirmed' CHECK (status IN ('pending', 'confirmed', 'cancelled')),
    tags JSONB DEFAULT '[]',
    project_id UUID REFERENCES ${schema}.projects(id) ON DELETE SET NULL,
    project_title VARCHAR(255),
    client_id UUID REFERENCES ${schema}.clients(id) ON DELETE SET NULL,
    client_name VARCHAR(255),
    is_recurring BOOLEAN DEFAULT false,
    recurring_frequency VARCHAR(20),
    created_at TIMESTAMP DEFAULT NOW(),
    updated_at TIMESTAMP DEFAULT NOW(),
    created_by VARCHAR(255),
    notes TEXT
);

-- =====================================================
-- COBRANÇA (ORÇAMENTOS E FATURAS)
-- =====================================================
CREATE TABLE IF NOT EXISTS ${schema}.billing (
    id UUID PRIMARY KEY DEFAULT gen_random_uuid(),
    type VARCHAR(20) NOT NULL CHECK (type IN ('estimate', 'invoice')),
    number VARCHAR(50) UNIQUE NOT NULL,
    title VARCHAR(255) NOT NULL,
    description TEXT,
    date DATE NOT NULL,
    due_date DATE NOT NULL,
    sender_name VARCHAR(255) NOT NULL,
    sender_details JSONB NOT NULL,
    receiver_id UUID,
    receiver_name VARCHAR(255) NOT NULL,
    receiver_details JSONB NOT NULL,
    items JSONB DEFAULT '[]',
    subtotal DECIMAL(15,2) DEFAULT 0,
    discount DECIMAL(15,2) DEFAULT 0,
    discount_type VARCHAR(20) DEFAULT 'fixed',
    fee DECIMAL(15,2) DEFAULT 0,
    fee_type VARCHAR(20) DEFAULT 'fixed',
    tax DECIMAL(15,2) DEFAULT 0,
    tax_type VARCHAR(20) DEFAULT 'percentage',
    total DECIMAL(15,2) DEFAULT 0,
    currency VARCHAR(3) DEFAULT 'BRL',
    status VARCHAR(20) DEFAULT 'DRAFT',
    payment_status VARCHAR(20),
    payment_method VARCHAR(20),
    payment_date TIMESTAMP,
    email_sent BOOLEAN DEFAULT false,
    email_sent_at TIMESTAMP,
    reminders_sent INTEGER DEFAULT 0,
    last_reminder_at TIMESTAMP,
    tags JSONB DEFAULT '[]',
    notes TEXT,
    created_at TIMESTAMP DEFAULT NOW(),
    updated_at TIMESTAMP DEFAULT NOW(),
    created_by VARCHAR(255),
    last_modified_by VARCHAR(255)
);

-- =====================================================
-- RECEBÍVEIS
-- =====================================================
CREATE TABLE IF NOT EXISTS ${schema}.invoices (
    id UUID PRIMARY KEY DEFAULT gen_random_uuid(),
    client_id VARCHAR(255) NOT NULL,
    numero_fatura VARCHAR(50) UNIQUE NOT NULL,
    valor DECIMAL(15,2) NOT NULL,
    descricao TEXT NOT NULL,
    servico_prestado VARCHAR(255) NOT NULL,
    data_emissao DATE NOT NULL,
    data_vencimento DATE NOT NULL,
    data_pagamento TIMESTAMP,
    status VARCHAR(20) DEFAULT 'nova' CHECK (status IN ('nova', 'pendente', 'atribuida', 'paga', 'vencida', 'cancelada', 'processando')),
    tentativas_cobranca INTEGER DEFAULT 0,
    stripe_invoice_id VARCHAR(255),
    stripe_customer_id VARCHAR(255),
    stripe_payment_intent_id VARCHAR(255),
    link_pagamento TEXT,
    ultima_notificacao TIMESTAMP,
    proxima_notificacao TIMESTAMP,
    recorrente BOOLEAN DEFAULT false,
    intervalo_dias INTEGER DEFAULT 30,
    proxima_fatura_data DATE,
    cliente_nome VARCHAR(255),
    cliente_email VARCHAR(255),
    cliente_telefone VARCHAR(50),
    criado_por VARCHAR(255),
    criado_em TIMESTAMP DEFAULT NOW(),
    atualizado_em TIMESTAMP DEFAULT NOW(),
    observacoes TEXT,
    urgencia VARCHAR(10) DEFAULT 'media' CHECK (urgencia IN ('baixa', 'media', 'alta'))
);

-- =====================================================
-- PUBLICAÇÕES (ISOLADAS POR USUÁRIO)
-- =====================================================
CREATE TABLE IF NOT EXISTS ${schema}.publications (
    id UUID PRIMARY KEY DEFAULT gen_random_uuid(),
    user_id VARCHAR(36) NOT NULL,
    data_publicacao DATE NOT NULL,
    processo VARCHAR(255) NOT NULL,
    diario VARCHAR(500) NOT NULL,
    vara_comarca VARCHAR(255) NOT NULL,
    nome_pesquisado VARCHAR(255) NOT NULL,
    status VARCHAR(20) DEFAULT 'nova' CHECK (status IN ('nova', 'pendente', 'atribuida', 'finalizada', 'descartada')),
    conteudo TEXT,
    observacoes TEXT,
    responsavel VARCHAR(255),
    numero_processo VARCHAR(255),
    cliente VARCHAR(255),
    urgencia VARCHAR(10) DEFAULT 'media' CHECK (urgencia IN ('baixa', 'media', 'alta')),
    tags JSONB DEFAULT '[]',
    atribuido_para_id VARCHAR(36),
    atribuido_para_nome VARCHAR(255),
    data_atribuicao TIMESTAMP,
    tarefas_vinculadas JSONB DEFAULT '[]',
    created_at TIMESTAMP DEFAULT NOW(),
    updated_at TIMESTAMP DEFAULT NOW()
);

-- =====================================================
-- NOTIFICAÇÕES
-- =====================================================
CREATE TABLE IF NOT EXISTS ${schema}.notifications (
    id UUID PRIMARY KEY DEFAULT gen_random_uuid(),
    type VARCHAR(20) NOT NULL,
    title VARCHAR(255) NOT NULL,
    message TEXT NOT NULL,
    category VARCHAR(50) NOT NULL,
    entity_type VARCHAR(50),
    entity_id UUID,
    action_data JSONB,
    user_id VARCHAR(36),
    read BOOLEAN DEFAULT false,
    created_by VARCHAR(255),
    details TEXT,
    created_at TIMESTAMP DEFAULT NOW(),
    updated_at TIMESTAMP DEFAULT NOW()
);

-- =====================================================
-- AUDITORIA
-- =====================================================
CREATE TABLE IF NOT EXISTS ${schema}.audit_log (
    id UUID PRIMARY KEY DEFAULT gen_random_uuid(),
    user_id VARCHAR(36),
    table_name VARCHAR(100) NOT NULL,
    record_id UUID,
    operation VARCHAR(10) NOT NULL CHECK (operation IN ('CREATE', 'UPDATE', 'DELETE')),
    old_data JSONB,
    new_data JSONB,
    ip_address INET,
    user_agent TEXT,
    created_at TIMESTAMP DEFAULT NOW()
);

-- =====================================================
-- ÍNDICES
-- =====================================================
CREATE INDEX IF NOT EXISTS idx_clients_name ON ${schema}.clients(name);
CREATE INDEX IF NOT EXISTS idx_clients_email ON ${schema}.clients(email);
CREATE INDEX IF NOT EXISTS idx_projects_status ON ${schema}.projects(status);
CREATE INDEX IF NOT EXISTS idx_projects_client_id ON ${schema}.projects(client_id);
CREATE INDEX IF NOT EXISTS idx_tasks_status ON ${schema}.tasks(status);
CREATE INDEX IF NOT EXISTS idx_tasks_assigned_to ON ${schema}.tasks(assigned_to);
CREATE INDEX IF NOT EXISTS idx_tasks_project_id ON ${schema}.tasks(project_id);
CREATE INDEX IF NOT EXISTS idx_cash_flow_date ON ${schema}.cash_flow(date);
CREATE INDEX IF NOT EXISTS idx_cash_flow_type ON ${schema}.cash_flow(type);
CREATE INDEX IF NOT EXISTS idx_billing_status ON ${schema}.billing(status);
CREATE INDEX IF NOT EXISTS idx_invoices_status ON ${schema}.invoices(status);
CREATE INDEX IF NOT EXISTS idx_invoices_data_vencimento ON ${schema}.invoices(data_vencimento);
CREATE INDEX IF NOT EXISTS idx_publications_user_id ON ${schema}.publications(user_id);
CREATE INDEX IF NOT EXISTS idx_publications_status ON ${schema}.publications(status);
CREATE INDEX IF NOT EXISTS idx_notifications_user_id ON ${schema}.notifications(user_id);
CREATE INDEX IF NOT EXISTS idx_notifications_read ON ${schema}.notifications(read);
"""

TENANT_TABLES = (
    "clients",
    "projects",
    "tasks",
    "cash_flow",
    "billing",
    "invoices",
    "publications",
    "notifications",
    "audit_log",
)

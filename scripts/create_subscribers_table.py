#!/usr/bin/env python3
"""
Create the subscribers table in Supabase.
Requires an ``exec_sql`` RPC function in the database.
"""

import os
import sys
from dotenv import load_dotenv
from supabase import create_client

load_dotenv()

TABLE = os.getenv("SUBSCRIBERS_TABLE", "subscribers")

CREATE_TABLE_SQL = f"""
CREATE TABLE IF NOT EXISTS {TABLE} (
    email VARCHAR(255) PRIMARY KEY,
    is_coming_soon BOOLEAN NOT NULL DEFAULT TRUE,
    follow_up_sent BOOLEAN NOT NULL DEFAULT FALSE,
    created_at TIMESTAMP WITH TIME ZONE DEFAULT NOW()
);
"""

INDEXES_SQL = [
    f"CREATE INDEX IF NOT EXISTS idx_{TABLE}_is_coming_soon ON {TABLE}(is_coming_soon);",
]

def create_subscribers_table() -> bool:
    supabase_url = os.getenv('SUPABASE_URL')
    supabase_key = os.getenv('SUPABASE_SERVICE_ROLE_KEY')
    
    if not supabase_url or not supabase_key:
        print("❌ Missing Supabase credentials. Please check your .env file.")
        return False
    
    try:
        supabase = create_client(supabase_url, supabase_key)
        print("✅ Connected to Supabase")
        
        supabase.rpc('exec_sql', {'sql': CREATE_TABLE_SQL}).execute()
        print(f"✅ {TABLE} table created")
        
        for index_sql in INDEXES_SQL:
            try:
                supabase.rpc('exec_sql', {'sql': index_sql}).execute()
                print(f"✅ Created index: {index_sql.split()[5]}")
            except Exception as e:
                print(f"⚠️  Index creation warning: {e}")
        
        return True
        
    except Exception as e:
        print(f"❌ Error creating {TABLE} table: {e}")
        return False

if __name__ == "__main__":
    print(f"🚀 Creating {TABLE} table in Supabase...")
    if not create_subscribers_table():
        sys.exit(1)
    print(f"\n✅ {TABLE} table is ready to use!")
